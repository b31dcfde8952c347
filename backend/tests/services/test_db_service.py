from datetime import date
from decimal import Decimal


def _expense(db, owner, name):
    doc = db.insert("expenses", {
        "profile_id": owner.id,
        "name": name,
        "amount": Decimal("1.00"),
        "date": date(2024, 1, 1),
    })
    db.commit()
    return doc


def test_update_touches_only_the_given_id(db, make_profile):
    owner = make_profile()
    first = _expense(db, owner, "first")
    second = _expense(db, owner, "second")

    assert db.update("expenses", first["id"], {"name": "renamed"}) == 1
    db.commit()

    assert db.find_one("expenses", {"id": first["id"]})["name"] == "renamed"
    assert db.find_one("expenses", {"id": first["id"]})["updated_at"] is not None
    assert db.find_one("expenses", {"id": second["id"]})["name"] == "second"


def test_delete_removes_only_the_given_id(db, make_profile):
    owner = make_profile()
    first = _expense(db, owner, "first")
    second = _expense(db, owner, "second")

    assert db.delete("expenses", first["id"]) == 1
    assert db.delete("expenses", "missing") == 0
    db.commit()

    assert db.find("expenses", {"profile_id": owner.id}) == [db.find_one("expenses", {"id": second["id"]})]


def test_sum_of_nothing_is_zero(db, make_profile):
    owner = make_profile()
    assert db.sum("expenses", "amount", {"profile_id": owner.id}) == Decimal("0")
