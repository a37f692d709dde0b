import pytest

from geomarcos.extraction.pipeline import process_document
from geomarcos.store import (
    CorrectionLogEntry,
    MarkerNotFoundError,
    MarkerRecord,
    MarkerStatus,
    MarkerStore,
    MarkerType,
)


@pytest.fixture()
def store() -> MarkerStore:
    store = MarkerStore("sqlite://")
    yield store
    store.dispose()


def test_add_and_get_marker(store: MarkerStore) -> None:
    marker_id = store.add_marker(MarkerRecord(code="FHV-M-3403", coordinate_e=627110.28, coordinate_n=7097954.68))
    record = store.get(marker_id)
    assert record is not None
    assert record.code == "FHV-M-3403"
    assert record.status is MarkerStatus.SURVEYED
    assert record.validated is None
    assert record.active is True
    assert store.get(9999) is None


def test_marker_type_from_code() -> None:
    assert MarkerType.from_code("FHV-M-3403") is MarkerType.MARK
    assert MarkerType.from_code("FHV-P-0001") is MarkerType.POINT
    assert MarkerType.from_code("V01") is MarkerType.VERTEX


def test_blank_code_is_rejected() -> None:
    with pytest.raises(ValueError):
        MarkerRecord(code="   ")


def test_add_vertices_from_extraction(store: MarkerStore) -> None:
    text = "marco FHV-M-3403 (E= 627.110,28 m e N= 7.097.954,68 m)"
    ids = store.add_vertices(process_document(text).vertices)
    assert len(ids) == 1
    record = store.get(ids[0])
    assert record.type is MarkerType.MARK
    assert record.coordinate_e == pytest.approx(627110.28)


def test_select_for_correction_filters(store: MarkerStore) -> None:
    keep = store.add_marker(MarkerRecord(code="A", coordinate_e=-49.47, coordinate_n=-25.32))
    store.add_marker(MarkerRecord(code="B", coordinate_e=None, coordinate_n=None))
    store.add_marker(MarkerRecord(code="C", coordinate_e=1.0, coordinate_n=2.0, active=False))
    store.add_marker(MarkerRecord(code="D", coordinate_e=1.0, coordinate_n=2.0, status=MarkerStatus.PENDING))
    assert [record.id for record in store.select_for_correction()] == [keep]


def test_select_for_validation_respects_force(store: MarkerStore) -> None:
    first = store.add_marker(MarkerRecord(code="A", coordinate_e=1.0, coordinate_n=2.0))
    second = store.add_marker(MarkerRecord(code="B", coordinate_e=1.0, coordinate_n=2.0))
    store.set_validation(first, True, None)
    assert [record.id for record in store.select_for_validation()] == [second]
    assert [record.id for record in store.select_for_validation(force=True)] == [first, second]


def test_writes_update_records(store: MarkerStore) -> None:
    marker_id = store.add_marker(MarkerRecord(code="A", coordinate_e=1.0, coordinate_n=2.0))
    store.update_coordinates(marker_id, 672338.25, 7187922.29)
    store.set_status(marker_id, MarkerStatus.PENDING)
    store.set_validation(marker_id, False, "Coordenadas nulas ou zeradas")
    record = store.get(marker_id)
    assert (record.coordinate_e, record.coordinate_n) == (672338.25, 7187922.29)
    assert record.status is MarkerStatus.PENDING
    assert record.validated is False
    assert record.validation_error == "Coordenadas nulas ou zeradas"
    assert record.validated_at is not None
    assert store.status_counts() == {"PENDING": 1}


def test_writes_to_unknown_marker_raise(store: MarkerStore) -> None:
    with pytest.raises(MarkerNotFoundError):
        store.update_coordinates(42, 1.0, 2.0)


def test_transaction_rolls_back_on_error(store: MarkerStore) -> None:
    marker_id = store.add_marker(MarkerRecord(code="A", coordinate_e=1.0, coordinate_n=2.0))
    with pytest.raises(RuntimeError):
        with store.transaction():
            store.update_coordinates(marker_id, 10.0, 20.0)
            store.append_correction(
                CorrectionLogEntry(
                    marker_id=marker_id, old_e=1.0, old_n=2.0, new_e=10.0, new_n=20.0, reason="r", operator="op"
                )
            )
            raise RuntimeError("boom")
    record = store.get(marker_id)
    assert (record.coordinate_e, record.coordinate_n) == (1.0, 2.0)
    assert store.corrections() == []


def test_correction_log_is_append_only(store: MarkerStore) -> None:
    marker_id = store.add_marker(MarkerRecord(code="A", coordinate_e=1.0, coordinate_n=2.0))
    entry = CorrectionLogEntry(marker_id=marker_id, old_e=1.0, old_n=2.0, new_e=3.0, new_n=4.0, reason="r", operator="op")
    store.append_correction(entry)
    store.append_correction(entry)
    (first, second) = store.corrections(marker_id)
    assert first.new_e == 3.0 and second.operator == "op"
    assert not hasattr(store, "delete_correction")
    with pytest.raises(Exception):
        entry.reason = "changed"
