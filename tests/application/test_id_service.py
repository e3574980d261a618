from lexis.application.id_service import generate_item_id, new_learning_item
from lexis.domain.models import ReviewState


def test_generate_item_id():
    item_id = generate_item_id()
    assert item_id.startswith("vocab_")
    assert len(item_id) == len("vocab_") + 26
    assert generate_item_id() != item_id


def test_new_learning_item():
    item = new_learning_item("ubiquitous", "Present everywhere", "academic", phonetic="/x/")

    assert item.id.startswith("vocab_")
    assert item.group_key == "academic"
    assert item.review_state == ReviewState()
    assert item.extra == {"phonetic": "/x/"}
