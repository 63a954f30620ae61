"""Drill past simple and past participle forms of English verbs."""
