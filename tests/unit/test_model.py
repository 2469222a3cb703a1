"""Tests for lazily loaded model collections."""
from __future__ import annotations

import threading
import time
from collections.abc import Iterator, Mapping, Sequence
from typing import Any

import pytest
import structlog
from structlog.testing import capture_logs

from orderly import Collection
from orderly.errors import InvalidSourceState
from orderly.model import (
    CallableSource,
    EagerLoadingSource,
    LazySource,
    Model,
    ModelCollection,
    collect,
)


class Customer:
    """Minimal record implementing the Model protocol."""

    def __init__(self, id: int, age: int = 0, *, valid: bool = True) -> None:  # noqa: A002
        self.id = id
        self.age = age
        self.valid = valid
        self.validated = False
        self.saved = False
        self.deleted = False
        self.scenario = "default"
        self.updated: list[str] | None = None
        self.inserted: list[str] | None = None

    def set_attributes(self, attributes: Mapping[str, Any]) -> None:
        for name, value in attributes.items():
            setattr(self, name, value)

    def validate(self) -> bool:
        self.validated = True
        return self.valid

    def save(self, run_validation: bool = True) -> bool:
        if run_validation and not self.validate():
            return False
        self.saved = True
        return True

    def update(
        self, run_validation: bool = True, attribute_names: Sequence[str] | None = None
    ) -> bool:
        if run_validation and not self.validate():
            return False
        self.updated = list(attribute_names or [])
        return True

    def insert(
        self, run_validation: bool = True, attribute_names: Sequence[str] | None = None
    ) -> bool:
        if run_validation and not self.validate():
            return False
        self.inserted = list(attribute_names or [])
        return True

    def delete(self) -> None:
        self.deleted = True

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "age": self.age}


class CountingSource:
    """Source that records how often it was fetched."""

    def __init__(self, records: list[Any], delay: float = 0.0) -> None:
        self.records = records
        self.delay = delay
        self.calls = 0

    def fetch_all(self) -> list[Any]:
        self.calls += 1
        if self.delay:
            time.sleep(self.delay)
        return list(self.records)


class RelationSource(CountingSource):
    """Source that can also attach related records."""

    def find_with(self, relations: Sequence[str], models: list[Any]) -> None:
        for model in models:
            for name in relations:
                setattr(model, name, f"{name}-of-{model.id}")


class CustomerCollection(ModelCollection):
    def total_age(self) -> int:
        return self.sum("age")


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    structlog.reset_defaults()
    yield
    structlog.reset_defaults()


@pytest.fixture
def customers() -> list[Customer]:
    return [Customer(1, 30), Customer(2, 40), Customer(3, 50)]


class TestLazyLoading:
    """Tests for deferred materialization."""

    def test_fetched_once_on_first_use(self, customers: list[Customer]) -> None:
        """Nothing is fetched until the items are needed, then only once."""
        source = CountingSource(customers)
        collection = collect(source)
        assert not collection.is_loaded
        assert source.calls == 0

        assert collection.count() == 3
        assert collection.is_loaded
        assert collection.sum("age") == 120
        assert [c.id for c in collection] == [1, 2, 3]
        assert source.calls == 1

    def test_concurrent_first_access(self, customers: list[Customer]) -> None:
        """Racing readers trigger a single fetch."""
        source = CountingSource(customers, delay=0.05)
        collection = collect(source)
        counts: list[int] = []
        threads = [
            threading.Thread(target=lambda: counts.append(collection.count())) for _ in range(8)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert counts == [3] * 8
        assert source.calls == 1

    def test_plain_callable_source(self) -> None:
        """Zero-argument callables are wrapped in CallableSource."""
        collection = collect(lambda: [1, 2, 3])
        assert isinstance(collection.source, CallableSource)
        assert isinstance(collection.source, LazySource)
        assert collection.to_list() == [1, 2, 3]

    def test_empty_source(self) -> None:
        """An empty source gives an empty, loaded collection."""
        collection = collect(lambda: [])
        assert collection.count() == 0
        assert collection.is_empty()
        assert collection.is_loaded

    def test_without_source(self) -> None:
        """Materializing without a source fails."""
        collection = ModelCollection()
        with pytest.raises(InvalidSourceState, match="not created from a source"):
            collection.count()

    def test_direct_models_are_loaded(self, customers: list[Customer]) -> None:
        """Models passed directly need no source."""
        collection = ModelCollection(customers)
        assert collection.is_loaded
        assert collection.models == customers

    def test_logs_materialization(self, customers: list[Customer]) -> None:
        """Loading emits a debug event with the record count."""
        collection = collect(CountingSource(customers))
        with capture_logs() as logs:
            collection.count()
        events = [entry for entry in logs if entry["event"] == "collection.materialized"]
        assert len(events) == 1
        assert events[0]["count"] == 3
        assert events[0]["log_level"] == "debug"


class TestCustomClass:
    """Tests for collect() with a ModelCollection subclass."""

    def test_subclass_is_used_and_propagated(self, customers: list[Customer]) -> None:
        """Derived collections keep the subclass."""
        collection = collect(CountingSource(customers), CustomerCollection)
        assert isinstance(collection, CustomerCollection)
        assert collection.total_age() == 120

        adults = collection.filter(lambda c: c.age > 35)
        assert isinstance(adults, CustomerCollection)
        assert adults.is_loaded
        assert adults.total_age() == 90

    def test_operations_over_models(self, customers: list[Customer]) -> None:
        """The full collection API is available."""
        collection = collect(lambda: customers)
        assert collection.index_by("id")[2] is customers[1]
        assert collection.sort_by("age", "desc").map(lambda c: c.id).to_list() == [3, 2, 1]


class TestBulkOperations:
    """Tests for fill/validate/save/delete."""

    def test_model_protocol(self) -> None:
        """The test record satisfies the Model protocol."""
        assert isinstance(Customer(1), Model)

    def test_fill_all(self, customers: list[Customer]) -> None:
        """Attributes are assigned to every model."""
        collection = ModelCollection(customers)
        assert collection.fill_all({"age": 18}) is collection
        assert [c.age for c in customers] == [18, 18, 18]

    def test_validate_all(self) -> None:
        """Every model is validated even after a failure."""
        models = [Customer(1), Customer(2, valid=False), Customer(3)]
        assert not ModelCollection(models).validate_all()
        assert all(m.validated for m in models)
        assert ModelCollection([Customer(4)]).validate_all()
        assert ModelCollection([]).validate_all()

    def test_save_all(self) -> None:
        """Invalid models are skipped unless validation is disabled."""
        models = [Customer(1), Customer(2, valid=False)]
        ModelCollection(models).save_all()
        assert [m.saved for m in models] == [True, False]

        ModelCollection(models).save_all(run_validation=False)
        assert [m.saved for m in models] == [True, True]

    def test_save_all_logs(self, customers: list[Customer]) -> None:
        """Saving logs how many models failed."""
        with capture_logs() as logs:
            ModelCollection(customers).save_all()
        saved = [entry for entry in logs if entry["event"] == "collection.saved"]
        assert saved[0]["count"] == 3
        assert saved[0]["failed"] == 0

    def test_delete_all(self, customers: list[Customer]) -> None:
        """Every model is deleted."""
        ModelCollection(customers).delete_all()
        assert all(c.deleted for c in customers)

    def test_to_array(self, customers: list[Customer]) -> None:
        """Models are projected to plain dicts."""
        array = ModelCollection(customers).to_array()
        assert type(array) is Collection
        assert array.to_list() == [
            {"id": 1, "age": 30},
            {"id": 2, "age": 40},
            {"id": 3, "age": 50},
        ]
        assert ModelCollection(customers).to_array(["id"]).to_list() == [
            {"id": 1},
            {"id": 2},
            {"id": 3},
        ]

    def test_to_json(self, customers: list[Customer]) -> None:
        """to_json encodes the projected models."""
        collection = ModelCollection(customers[:1])
        assert collection.to_json() == '[{"id":1,"age":30}]'

    def test_to_array_keeps_field_accessor(self, customers: list[Customer]) -> None:
        """The projection resolves fields with the receiver's accessor."""

        class LowerAccessor:
            def get(self, item: Any, spec: Any, default: Any = None) -> Any:
                return item.get(str(spec).lower(), default)

        accessor = LowerAccessor()
        array = ModelCollection(customers, field_accessor=accessor).to_array()
        assert array.field_accessor is accessor
        assert array.sum("AGE") == 120

    def test_update_all(self) -> None:
        """Attributes are assigned and only their names are updated."""
        models = [Customer(1), Customer(2, valid=False)]
        with capture_logs() as logs:
            result = ModelCollection(models).update_all({"age": 21, "id": 9})
        assert [m.age for m in models] == [21, 21]
        assert models[0].updated == ["age", "id"]
        assert models[1].updated is None
        updated = [entry for entry in logs if entry["event"] == "collection.updated"]
        assert updated[0]["failed"] == 1
        assert isinstance(result, ModelCollection)

        ModelCollection(models).update_all({"age": 22}, run_validation=False)
        assert models[1].updated == ["age"]

    def test_insert_all(self) -> None:
        """Every model is inserted with the assigned attribute names."""
        models = [Customer(1), Customer(2, valid=False)]
        ModelCollection(models).insert_all({"age": 5})
        assert models[0].inserted == ["age"]
        assert models[1].inserted is None

        ModelCollection(models).insert_all({"age": 6}, run_validation=False)
        assert [m.inserted for m in models] == [["age"], ["age"]]
        assert [m.age for m in models] == [6, 6]


class TestScenarioAndRelations:
    """Tests for scenario() and find_with()."""

    def test_scenario(self, customers: list[Customer]) -> None:
        """The scenario is set on every model."""
        collection = collect(CountingSource(customers))
        assert collection.scenario("signup") is collection
        assert [c.scenario for c in customers] == ["signup"] * 3

    def test_find_with(self, customers: list[Customer]) -> None:
        """Relations are loaded through the source into the fetched models."""
        source = RelationSource(customers)
        assert isinstance(source, EagerLoadingSource)
        collection = collect(source)

        assert collection.find_with(["orders", "address"]) is collection
        assert customers[0].orders == "orders-of-1"  # type: ignore[attr-defined]
        assert customers[2].address == "address-of-3"  # type: ignore[attr-defined]
        assert source.calls == 1

        collection.find_with("profile")
        assert customers[1].profile == "profile-of-2"  # type: ignore[attr-defined]

    def test_find_with_unsupported_source(self, customers: list[Customer]) -> None:
        """Sources without find_with cannot load relations."""
        collection = collect(CountingSource(customers))
        with pytest.raises(InvalidSourceState, match="cannot load relations"):
            collection.find_with("orders")

    def test_find_with_without_source(self, customers: list[Customer]) -> None:
        """Collections built from models directly have no source."""
        with pytest.raises(InvalidSourceState, match="cannot load relations"):
            ModelCollection(customers).find_with("orders")
