from __future__ import annotations

import json
import random
from itertools import count

import pytest

from fixtures import make_verb
from verb_drill.verbs.seed import seed_verbs
from verb_drill.verbs.storage import FileSlotStorage, SlotStorageError
from verb_drill.verbs.store import DEFAULT_SLOT_KEY, VerbStore


class MemorySlots:
    """Dict-backed slot storage that counts writes."""

    def __init__(self, initial=None):
        self.slots = dict(initial or {})
        self.writes = 0

    def read(self, key):
        return self.slots.get(key)

    def write(self, key, text):
        self.writes += 1
        self.slots[key] = text


class BrokenSlots(MemorySlots):
    def read(self, key):
        raise SlotStorageError("cannot read")


def _counter_ids():
    numbers = count(1)
    return lambda: f"gen-{next(numbers)}"


def _store(initial=None, **kwargs):
    slots = MemorySlots(initial)
    store = VerbStore(slots, id_allocator=_counter_ids(), **kwargs)
    return store, slots


def _snapshot(records):
    return json.dumps([record.to_dict() for record in records])


def _bases(store):
    return [record.base for record in store]


def test_new_store_starts_with_seed_set():
    store, _ = _store()

    assert store.records == seed_verbs()
    assert len(store) == 10
    assert store.key == DEFAULT_SLOT_KEY


def test_load_missing_slot_returns_seed_set():
    store, slots = _store()

    loaded = store.load()

    assert loaded == seed_verbs()
    assert slots.writes == 0


def test_load_reads_saved_collection_in_order():
    saved = [make_verb("fly", "flew", "flown"), make_verb("walk", "walked")]
    store, _ = _store({DEFAULT_SLOT_KEY: _snapshot(saved)})

    assert store.load() == tuple(saved)


def test_empty_saved_collection_is_valid():
    store, _ = _store({DEFAULT_SLOT_KEY: "[]"})

    assert store.load() == ()
    assert len(store) == 0


@pytest.mark.parametrize(
    "raw",
    [
        "{not json",
        '{"base": "go"}',
        '[{"base": "go"}]',
        json.dumps([{**make_verb().to_dict(), "id": ""}]),
        _snapshot([make_verb("Go", "went", "gone"), make_verb("go", id="b")]),
        '["go"]',
    ],
)
def test_unusable_snapshot_falls_back_to_seed(raw, caplog):
    store, _ = _store({DEFAULT_SLOT_KEY: raw})

    with caplog.at_level("WARNING", logger="verb_drill.verbs.store"):
        loaded = store.load()

    assert loaded == seed_verbs()
    assert "falling back to seed set" in caplog.text


def test_unreadable_slot_falls_back_to_seed():
    store = VerbStore(BrokenSlots())

    assert store.load() == seed_verbs()


def test_save_then_fresh_load_round_trips(tmp_path):
    storage = FileSlotStorage(tmp_path)
    store = VerbStore(storage, id_allocator=_counter_ids())
    store.merge([make_verb("fly", "flew", "flown", meaning="날다")])

    reloaded = VerbStore(storage)
    reloaded.load()

    assert reloaded.records == store.records
    raw = storage.read(DEFAULT_SLOT_KEY)
    assert "날다" in raw
    assert json.loads(raw)[0]["isIrregular"] is True


def test_merge_rejects_existing_base_case_insensitively():
    store, slots = _store()
    store.load()

    result = store.merge([make_verb("Go", "went", "gone", id="new-go")])

    assert result.accepted == ()
    assert result.rejected_count == 1
    assert not result.added_any
    assert store.records == seed_verbs()
    assert slots.writes == 0


def test_merge_empty_batch_is_a_no_op():
    store, slots = _store()

    result = store.merge([])

    assert result.accepted == ()
    assert result.rejected_count == 0
    assert store.records == seed_verbs()
    assert slots.writes == 0


def test_merge_prepends_batch_in_order_and_saves_once():
    store, slots = _store()
    batch = [
        make_verb("fly", "flew", "flown", id=""),
        make_verb("build", "built", "built", id=""),
    ]

    result = store.merge(batch)

    assert [r.base for r in result.accepted] == ["fly", "build"]
    assert [r.id for r in result.accepted] == ["gen-1", "gen-2"]
    assert _bases(store)[:3] == ["fly", "build", "go"]
    assert slots.writes == 1
    saved = json.loads(slots.slots[DEFAULT_SLOT_KEY])
    assert [entry["base"] for entry in saved] == _bases(store)


def test_merge_rejects_duplicates_within_one_batch():
    store, _ = _store()

    result = store.merge(
        [
            make_verb("fly", "flew", "flown", id="a"),
            make_verb(" FLY", "flew", "flown", id="b"),
        ]
    )

    assert [r.id for r in result.accepted] == ["a"]
    assert result.rejected_count == 1


def test_merge_reassigns_colliding_ids():
    store, _ = _store()

    result = store.merge([make_verb("fly", "flew", "flown", id="seed-go")])

    assert result.accepted[0].id == "gen-1"
    assert len({record.id for record in store}) == len(store)


def test_merge_twice_matches_merging_once():
    batch = [
        make_verb("fly", "flew", "flown"),
        make_verb("eat", "ate", "eaten"),
        make_verb("swim", "swam", "swum"),
    ]
    once, _ = _store()
    once.merge(batch)
    twice, _ = _store()
    twice.merge(batch)

    second = twice.merge(batch)

    assert second.accepted == ()
    assert second.rejected_count == len(batch)
    assert twice.records == once.records


def test_base_stays_unique_across_random_merges():
    rng = random.Random(7)
    words = ["Go", "go", "fly", "FLY", "sing", "Sing ", "run", "eat", "bring"]
    store, _ = _store()

    for _ in range(25):
        batch = [
            make_verb(rng.choice(words), "x", "y", id="")
            for _ in range(rng.randint(0, 4))
        ]
        store.merge(batch)
        keys = [record.key for record in store]
        assert len(keys) == len(set(keys))


def test_reset_restores_and_persists_seed():
    store, slots = _store()
    store.merge([make_verb("fly", "flew", "flown")])

    store.reset()

    assert store.records == seed_verbs()
    assert len(json.loads(slots.slots[DEFAULT_SLOT_KEY])) == 10


def test_find_and_search():
    store, _ = _store()
    store.merge([make_verb("Fly", "flew", "flown", meaning="날다")])

    assert store.find(" fly ").base == "Fly"
    assert store.find("swim") is None
    assert _bases_of(store.search("FL")) == ["Fly"]
    assert _bases_of(store.search("마시")) == ["drink"]
    assert len(store.search("  ")) == len(store)


def _bases_of(records):
    return [record.base for record in records]


def test_save_failure_propagates():
    class ReadOnlySlots(MemorySlots):
        def write(self, key, text):
            raise SlotStorageError("read-only")

    store = VerbStore(ReadOnlySlots())

    with pytest.raises(SlotStorageError):
        store.merge([make_verb("fly", "flew", "flown")])
