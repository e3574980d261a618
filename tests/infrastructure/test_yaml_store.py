"""Tests for the YAML item repository and serialization helpers."""

from datetime import date, datetime, timezone

import pytest
import yaml

from lexis.application.review_engine import is_due_for_review, process_review
from lexis.domain.models import LearnerStats, LearningItem, ReviewState
from lexis.infrastructure.adapters.yaml_store import YamlItemRepository
from lexis.infrastructure.serialization import item_from_dict, item_to_dict, state_from_dict

from tests.conftest import NOW, make_item


@pytest.fixture
def repo(tmp_path):
    return YamlItemRepository(tmp_path / "data")


@pytest.mark.asyncio
async def test_missing_file_is_empty(repo):
    assert await repo.fetch_all_items("ana") == []
    assert await repo.fetch_stats("ana") == LearnerStats()


@pytest.mark.asyncio
async def test_commit_and_reload(repo):
    reviewed = LearningItem(
        id="w1",
        term="ubiquitous",
        definition="Present everywhere",
        group_key="academic",
        review_state=process_review(ReviewState(), 4, NOW),
        extra={"phonetic": "/juːˈbɪkwɪtəs/", "examples": ["Phones are ubiquitous"]},
    )
    assert await repo.commit_items("ana", [reviewed, make_item("w2")]) is True

    loaded = await repo.fetch_all_items("ana")

    assert [i.id for i in loaded] == ["w1", "w2"]
    assert loaded[0] == reviewed
    assert loaded[0].review_state.next_review_at.tzinfo is not None


@pytest.mark.asyncio
async def test_commit_is_upsert(repo):
    await repo.commit_items("ana", [make_item("a"), make_item("b")])
    await repo.commit_items("ana", [make_item("b", total=2, wrong=1), make_item("c")])

    loaded = await repo.fetch_all_items("ana")

    assert [i.id for i in loaded] == ["a", "b", "c"]
    assert loaded[1].review_state.wrong_reviews == 1


@pytest.mark.asyncio
async def test_stats_preserve_items(repo):
    await repo.commit_items("ana", [make_item("a")])
    stats = LearnerStats(total_reviews=3, today_date=date(2026, 3, 10),
                         last_study_date=date(2026, 3, 10), streak=1, xp=40)

    assert await repo.commit_stats("ana", stats) is True

    assert await repo.fetch_stats("ana") == stats
    assert [i.id for i in await repo.fetch_all_items("ana")] == ["a"]


@pytest.mark.asyncio
async def test_corrupt_file_is_not_overwritten(repo):
    path = repo.path_for("ana")
    path.parent.mkdir(parents=True)
    path.write_text("items: [unclosed\n")

    assert await repo.fetch_all_items("ana") == []
    assert await repo.commit_items("ana", [make_item("a")]) is False
    assert path.read_text() == "items: [unclosed\n"


@pytest.mark.asyncio
async def test_malformed_item_skipped(repo):
    path = repo.path_for("ana")
    path.parent.mkdir(parents=True)
    path.write_text(yaml.safe_dump({"items": [{"term": "no id"}, {"id": "ok", "term": "x"}]}))

    loaded = await repo.fetch_all_items("ana")

    assert [i.id for i in loaded] == ["ok"]
    assert loaded[0].review_state == ReviewState()


@pytest.mark.asyncio
async def test_commit_notifies(repo):
    seen = []
    repo.on_items_changed("ana", seen.append)
    await repo.commit_items("ana", [make_item("a")])
    assert [i.id for i in seen[0]] == ["a"]


@pytest.mark.parametrize("learner", ["../etc", "a/b", "", ".."])
def test_invalid_learner_id(repo, learner):
    with pytest.raises(ValueError):
        repo.path_for(learner)


def test_empty_review_state_means_new():
    item = item_from_dict({"id": "w1", "term": "t", "review_state": {}})
    assert item.review_state == ReviewState()
    assert item.group_key is None


def test_item_dict_keeps_display_fields():
    data = item_to_dict(make_item("w1", "L1"))
    assert data["group"] == "L1"
    assert data["review_state"]["ease_factor"] == 2.5

    data["synonyms"] = ["omnipresent"]
    assert item_from_dict(data).extra == {"synonyms": ["omnipresent"]}


def test_state_accepts_yaml_datetimes():
    stamp = datetime(2026, 3, 1, 8, 0, tzinfo=timezone.utc)
    state = state_from_dict({"next_review_at": stamp, "total_reviews": 1, "correct_reviews": 1})
    assert state.next_review_at == stamp


@pytest.mark.parametrize(
    "stored",
    ["2026-03-01T08:00:00", datetime(2026, 3, 1, 8, 0), date(2026, 3, 1), "2026-03-01"],
)
def test_naive_timestamps_read_as_utc(stored):
    state = state_from_dict({"next_review_at": stored, "total_reviews": 1, "correct_reviews": 1})

    assert state.next_review_at.tzinfo is not None
    assert state.next_review_at.utcoffset().total_seconds() == 0
    assert is_due_for_review(state, NOW) is True


@pytest.mark.asyncio
async def test_hand_edited_file_with_unquoted_timestamp(repo):
    path = repo.path_for("ana")
    path.parent.mkdir(parents=True)
    path.write_text(
        "items:\n"
        "  - id: w1\n"
        "    term: laconic\n"
        "    review_state:\n"
        "      next_review_at: 2026-03-01 08:00:00\n"
        "      last_reviewed_at: 2026-02-28\n"
    )

    (item,) = await repo.fetch_all_items("ana")

    assert item.review_state.next_review_at == datetime(2026, 3, 1, 8, 0, tzinfo=timezone.utc)
    assert is_due_for_review(item.review_state, NOW) is True


@pytest.mark.asyncio
async def test_commit_skips_malformed_stored_item(repo):
    path = repo.path_for("ana")
    path.parent.mkdir(parents=True)
    path.write_text(
        yaml.safe_dump(
            {"items": [{"id": "broken", "review_state": {"next_review_at": "not a date"}}]}
        )
    )
    seen = []
    repo.on_items_changed("ana", seen.append)

    assert await repo.commit_items("ana", [make_item("a")]) is True

    assert [i.id for i in seen[0]] == ["a"]
    assert "broken" in path.read_text()
