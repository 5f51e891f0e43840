from __future__ import annotations

import math

import pytest

from dbcursor import BatchCursor, DecodeError, SourceError, TransformError


class _RecordingTransform:
    def __init__(self, fail_on: int | None = None) -> None:
        self.sizes: list[int] = []
        self.fail_on = fail_on

    def __call__(self, recs: list) -> None:
        self.sizes.append(len(recs))
        if self.fail_on is not None and len(self.sizes) == self.fail_on:
            raise RuntimeError("enrichment failed")
        for i, rec in enumerate(recs):
            recs[i] = {"value": rec, "batch": len(self.sizes)}


@pytest.mark.parametrize(
    ("total", "limit"),
    [(0, 3), (1, 3), (9, 3), (10, 3), (1234, 200), (5, 1), (7, 100)],
)
def test_drain_yields_every_record_with_one_transform_per_batch(
    fake_rows, scan_value, total: int, limit: int
) -> None:
    transform = _RecordingTransform()
    cur = BatchCursor(fake_rows(range(total)), limit, scan_value, transform)

    got = list(cur)

    assert [rec["value"] for rec in got] == list(range(total))
    assert len(transform.sizes) == math.ceil(total / limit)
    assert all(size == limit for size in transform.sizes[:-1])
    if transform.sizes:
        assert 0 < transform.sizes[-1] <= limit
    assert cur.err() is None


@pytest.mark.parametrize("limit", [0, -1])
def test_non_positive_limit_reads_one_unbounded_batch(fake_rows, scan_value, limit: int) -> None:
    transform = _RecordingTransform()
    cur = BatchCursor(fake_rows(range(50)), limit, scan_value, transform)

    assert len(list(cur)) == 50
    assert transform.sizes == [50]


def test_transform_never_sees_an_empty_batch(fake_rows, scan_value) -> None:
    transform = _RecordingTransform()
    cur = BatchCursor(fake_rows([]), 10, scan_value, transform)

    assert cur.next() is False
    assert cur.next() is False
    assert transform.sizes == []
    assert cur.err() is None


def test_exact_multiple_does_not_transform_trailing_empty_batch(fake_rows, scan_value) -> None:
    transform = _RecordingTransform()
    cur = BatchCursor(fake_rows(range(6)), 3, scan_value, transform)

    assert len(list(cur)) == 6
    assert transform.sizes == [3, 3]


def test_record_before_start_and_after_end_is_none(fake_rows, scan_value) -> None:
    cur = BatchCursor(fake_rows([1, 2]), 5, scan_value)

    assert cur.record() is None
    assert cur.next() and cur.record() == 1
    assert cur.record() == 1
    assert cur.next() and cur.record() == 2
    assert cur.next() is False
    assert cur.record() is None


def test_records_outlive_later_refills(fake_rows, scan_value) -> None:
    captured = []
    cur = BatchCursor(fake_rows(range(4)), 2, scan_value, captured.append)

    list(cur)

    assert captured == [[0, 1], [2, 3]]


def test_decode_failure_aborts_refill(fake_rows) -> None:
    def scan(rs):
        value = rs.scan()[0]
        if value == 4:
            raise ValueError("cannot decode")
        return value

    transform = _RecordingTransform()
    cur = BatchCursor(fake_rows(range(10)), 3, scan, transform)

    got = list(cur)

    assert [rec["value"] for rec in got] == [0, 1, 2]
    assert cur.record() is None
    err = cur.err()
    assert isinstance(err, DecodeError)
    assert err.row_number == 5
    assert transform.sizes == [3]
    assert cur.next() is False


def test_source_fault_after_pull_loop_aborts_refill(fake_rows, scan_value) -> None:
    boom = ConnectionError("server closed the connection")
    transform = _RecordingTransform()
    cur = BatchCursor(fake_rows(range(10), error=boom, error_after=5), 3, scan_value, transform)

    assert len(list(cur)) == 3
    err = cur.err()
    assert isinstance(err, SourceError)
    assert err.__cause__ is boom
    # The partial second batch is never enriched.
    assert transform.sizes == [3]


def test_transform_failure_is_terminal(fake_rows, scan_value) -> None:
    transform = _RecordingTransform(fail_on=2)
    rows = fake_rows(range(10))
    cur = BatchCursor(rows, 4, scan_value, transform)

    assert len(list(cur)) == 4
    err = cur.err()
    assert isinstance(err, TransformError)
    assert err.batch_size == 4
    assert isinstance(err.__cause__, RuntimeError)

    pos = rows.pos
    assert cur.next() is False
    assert rows.pos == pos
    assert transform.sizes == [4, 4]


def test_done_cursor_does_not_touch_source_again(fake_rows, scan_value) -> None:
    rows = fake_rows([1])
    cur = BatchCursor(rows, 10, scan_value)

    assert list(cur) == [1]
    rows.values.append(2)
    rows.exhausted = False

    assert cur.next() is False


def test_reset_installs_new_source(fake_rows, scan_value) -> None:
    first = fake_rows([1, 2])
    cur = BatchCursor(first, 0, scan_value)
    assert list(cur) == [1, 2]

    second = fake_rows([3])
    cur.reset(second)

    assert cur.record() is None
    assert list(cur) == [3]
    assert cur.close() is None
    assert second.close_calls == 1
    assert first.close_calls == 0


def test_cursor_without_source_is_empty(scan_value) -> None:
    cur = BatchCursor(None, 10, scan_value)

    assert cur.next() is False
    assert cur.close() is None
