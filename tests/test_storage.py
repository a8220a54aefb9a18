import pytest
from sqlalchemy.exc import IntegrityError

from models import storage
from models.base_model import BaseModel
from models.ingredient import Ingredient
from models.user import User


def test_models_get_uuid_ids_and_timestamps(app):
    lime = Ingredient(name="Lime", type="Fruit")
    assert len(lime.id) == 36
    storage.new(lime)
    storage.save()

    fetched = storage.get(Ingredient, lime.id)
    assert fetched is lime
    assert fetched.created_at is not None
    assert fetched.updated_at is not None


def test_get_rejects_unknown_class_and_empty_id(app, user):
    assert storage.get(User, "") is None
    assert storage.get(dict, user.id) is None
    assert storage.get(User, "missing") is None


def test_failed_commit_rolls_back(app):
    storage.new(Ingredient(name="Salt", type="Spice"))
    storage.save()

    storage.new(Ingredient(name="Salt", type="Spice"))
    with pytest.raises(IntegrityError):
        storage.save()

    # the session is usable again after the rollback
    storage.new(Ingredient(name="Pepper", type="Spice"))
    storage.save()
    assert storage.get_session().query(Ingredient).count() == 2


def test_base_model_carries_only_columns_and_init():
    public = {name for name in vars(BaseModel) if not name.startswith("_")}
    assert public == {"id", "created_at", "updated_at"}


def test_delete(app, user):
    storage.delete(user)
    storage.save()
    assert storage.get(User, user.id) is None
