"""Tests for the EventProcessor batch pipeline."""

import json
from datetime import datetime, timezone
from typing import Any, Callable

import pytest

from dynamo_search_relay.exceptions import IndexingError
from dynamo_search_relay.models import MessageState
from dynamo_search_relay.processor import EventProcessor

FIXED_NOW = datetime(2024, 7, 1, tzinfo=timezone.utc)
USERS_ARN = (
    "arn:aws:dynamodb:us-east-1:123456789012:table/Users/stream/"
    "2024-01-01T00:00:00.000"
)

RecordFactory = Callable[..., dict[str, Any]]


@pytest.fixture
def processor(indexing, acknowledgement, queue_urls, mock_metrics):
    return EventProcessor(
        indexing=indexing,
        acknowledgement=acknowledgement,
        queue_urls=queue_urls,
        metrics=mock_metrics,
        clock=lambda: FIXED_NOW,
    )


def test_process_indexes_and_acknowledges(
    processor: EventProcessor,
    indexing,
    acknowledgement,
    queue_urls,
    make_stream_record: RecordFactory,
    make_sqs_message: RecordFactory,
) -> None:
    message = make_sqs_message(make_stream_record(), receipt_handle="rh-1")

    result = processor.process({"Records": [message]})

    assert result.received == 1
    assert result.acknowledged == 1
    assert result.failed_message_ids == []
    assert indexing.indices["orders"]["Product#X"]["price"] == 10
    assert (
        indexing.indices["orders"]["Product#X"]["event_timestamp"]
        == "2024-07-01T00:00:00.000Z"
    )
    assert acknowledgement.deleted == [(queue_urls[0], "rh-1")]


def test_process_accepts_plain_message_list(
    processor: EventProcessor,
    acknowledgement,
    make_stream_record: RecordFactory,
    make_sqs_message: RecordFactory,
) -> None:
    result = processor.process([make_sqs_message(make_stream_record())])
    assert result.acknowledged == 1
    assert len(acknowledgement.deleted) == 1


@pytest.mark.parametrize("batch", [None, {}, {"Records": []}, []])
def test_process_empty_batch_is_noop(
    processor: EventProcessor, indexing, acknowledgement, batch: Any
) -> None:
    result = processor.process(batch)
    assert result.received == 0
    assert indexing.indices == {}
    assert acknowledgement.deleted == []


def test_process_routes_each_table_to_its_queue(
    processor: EventProcessor,
    indexing,
    acknowledgement,
    queue_urls,
    make_stream_record: RecordFactory,
    make_sqs_message: RecordFactory,
) -> None:
    batch = {
        "Records": [
            make_sqs_message(
                make_stream_record(pk="Order#1"), "m1", "rh-orders"
            ),
            make_sqs_message(
                make_stream_record(pk="User#1", arn=USERS_ARN),
                "m2",
                "rh-users",
            ),
        ]
    }

    processor.process(batch)

    assert set(indexing.indices) == {"orders", "users"}
    assert acknowledgement.deleted == [
        (queue_urls[0], "rh-orders"),
        (queue_urls[1], "rh-users"),
    ]


def test_process_writes_before_acknowledging(
    processor: EventProcessor,
    journal,
    make_stream_record: RecordFactory,
    make_sqs_message: RecordFactory,
) -> None:
    processor.process(
        {
            "Records": [
                make_sqs_message(make_stream_record(pk="A"), "m1", "rh-1"),
                make_sqs_message(make_stream_record(pk="B"), "m2", "rh-2"),
            ]
        }
    )

    steps = [entry[0] for entry in journal]
    assert steps == ["create", "ack", "create", "ack"]
    assert journal[0][2] == "A"
    assert journal[1][2] == "rh-1"


def test_process_is_idempotent_under_redelivery(
    processor: EventProcessor,
    indexing,
    make_stream_record: RecordFactory,
    make_sqs_message: RecordFactory,
) -> None:
    message = make_sqs_message(make_stream_record())

    processor.process({"Records": [message]})
    first = dict(indexing.indices["orders"])
    processor.process({"Records": [message]})

    assert indexing.indices["orders"] == first
    assert len(indexing.indices["orders"]) == 1


def test_unconfirmed_write_is_not_acknowledged(
    processor: EventProcessor,
    indexing,
    acknowledgement,
    make_stream_record: RecordFactory,
    make_sqs_message: RecordFactory,
) -> None:
    indexing.confirm_writes = False

    result = processor.process(
        {"Records": [make_sqs_message(make_stream_record(), "m1")]}
    )

    assert acknowledgement.deleted == []
    assert result.failed_message_ids == ["m1"]
    assert result.outcomes[0].state is MessageState.FAILED


def test_failed_write_is_not_acknowledged_and_batch_continues(
    processor: EventProcessor,
    indexing,
    acknowledgement,
    queue_urls,
    make_stream_record: RecordFactory,
    make_sqs_message: RecordFactory,
    mock_metrics,
) -> None:
    indexing.failing_indices.add("orders")

    result = processor.process(
        {
            "Records": [
                make_sqs_message(make_stream_record(), "m1", "rh-1"),
                make_sqs_message(
                    make_stream_record(pk="User#1", arn=USERS_ARN),
                    "m2",
                    "rh-2",
                ),
            ]
        }
    )

    assert result.failed_message_ids == ["m1"]
    assert acknowledgement.deleted == [(queue_urls[1], "rh-2")]
    assert result.outcomes[0].table_name == "orders"
    assert mock_metrics.total("MessageProcessingFailed") == 1


def test_every_message_failing_never_raises(
    processor: EventProcessor,
    indexing,
    acknowledgement,
    make_stream_record: RecordFactory,
    make_sqs_message: RecordFactory,
) -> None:
    batch = {
        "Records": [
            make_sqs_message("{not json", "bad-json"),
            make_sqs_message({"foo": "bar"}, "no-event"),
            make_sqs_message(
                make_stream_record(include_new_image=False), "no-image"
            ),
            make_sqs_message(
                make_stream_record(new_image={"price": {"N": "1"}}), "no-pk"
            ),
            make_sqs_message(
                make_stream_record(arn="arn:aws:dynamodb:no-table"),
                "no-table",
            ),
            make_sqs_message(
                make_stream_record(
                    arn="arn:aws:dynamodb:us-east-1:1:table/Payments/stream/x"
                ),
                "no-queue",
            ),
        ]
    }

    result = processor.process(batch)

    assert result.received == 6
    assert result.acknowledged == 0
    assert result.failed_message_ids == [
        "bad-json",
        "no-event",
        "no-image",
        "no-pk",
        "no-table",
        "no-queue",
    ]
    assert indexing.indices == {}
    assert acknowledgement.deleted == []


def test_malformed_batch_element_does_not_stop_batch(
    processor: EventProcessor,
    acknowledgement,
    queue_urls,
    make_stream_record: RecordFactory,
    make_sqs_message: RecordFactory,
    mock_metrics,
) -> None:
    valid = make_sqs_message(make_stream_record(), "m1", "rh-1")

    result = processor.process({"Records": ["not-a-record", None, valid]})

    assert result.received == 3
    assert result.acknowledged == 1
    assert [outcome.state for outcome in result.outcomes] == [
        MessageState.FAILED,
        MessageState.FAILED,
        MessageState.ACKNOWLEDGED,
    ]
    assert acknowledgement.deleted == [(queue_urls[0], "rh-1")]
    assert mock_metrics.total("MessageProcessingFailed") == 2


@pytest.mark.parametrize("records", ["not-a-list", 42, {"a": 1}])
def test_non_list_records_is_noop(
    processor: EventProcessor, acknowledgement, records: Any
) -> None:
    result = processor.process({"Records": records})
    assert result.received == 0
    assert acknowledgement.deleted == []


def test_failure_states_reflect_last_completed_step(
    processor: EventProcessor,
    make_stream_record: RecordFactory,
    make_sqs_message: RecordFactory,
) -> None:
    result = processor.process(
        {
            "Records": [
                make_sqs_message(
                    make_stream_record(
                        arn="arn:aws:dynamodb:us-east-1:1:table/Payments/s/x"
                    ),
                    "no-queue",
                )
            ]
        }
    )

    outcome = result.outcomes[0]
    assert outcome.state is MessageState.FAILED
    assert "payments" in outcome.error


def test_acknowledgement_failure_is_isolated(
    processor: EventProcessor,
    indexing,
    acknowledgement,
    make_stream_record: RecordFactory,
    make_sqs_message: RecordFactory,
) -> None:
    acknowledgement.fail_deletes = True

    result = processor.process(
        {"Records": [make_sqs_message(make_stream_record(), "m1")]}
    )

    # Written but left on the queue; redelivery re-upserts the same document
    assert "Product#X" in indexing.indices["orders"]
    assert result.failed_message_ids == ["m1"]


def test_missing_receipt_handle_is_not_acknowledged(
    processor: EventProcessor,
    acknowledgement,
    make_stream_record: RecordFactory,
) -> None:
    message = {"messageId": "m1", "body": json.dumps(make_stream_record())}

    result = processor.process({"Records": [message]})

    assert acknowledgement.deleted == []
    assert result.failed_message_ids == ["m1"]


def test_metrics_are_recorded(
    processor: EventProcessor,
    mock_metrics,
    make_stream_record: RecordFactory,
    make_sqs_message: RecordFactory,
) -> None:
    processor.process(
        {
            "Records": [
                make_sqs_message(make_stream_record(), "m1"),
                make_sqs_message({"foo": "bar"}, "m2"),
            ]
        }
    )

    assert mock_metrics.total("MessagesReceived") == 2
    assert mock_metrics.total("RecordsIndexed") == 1
    assert mock_metrics.total("MessagesAcknowledged") == 1
    assert mock_metrics.total("EnvelopeParseMiss") == 1


# Test synchronous operations


def test_search_lowercases_table_name(
    processor: EventProcessor, indexing
) -> None:
    indexing.create("orders", "a", {"pk": "a"})
    indexing.create("orders", "b", {"pk": "b"})

    assert processor.search("ORDERS", {"size": 1}) == [{"pk": "a"}]
    assert processor.search("Orders") == [{"pk": "a"}, {"pk": "b"}]


def test_get_and_delete(processor: EventProcessor, indexing) -> None:
    indexing.create("orders", "a", {"pk": "a"})

    assert processor.get("Orders", "a") == {"pk": "a"}
    processor.delete("Orders", "a")
    assert processor.get("orders", "a") is None


def test_search_surfaces_errors(processor: EventProcessor, indexing) -> None:
    indexing.failing_indices.add("orders")
    with pytest.raises(IndexingError):
        processor.search("orders", {})


def test_delete_surfaces_errors(processor: EventProcessor, indexing) -> None:
    indexing.failing_indices.add("orders")
    with pytest.raises(IndexingError):
        processor.delete("orders", "a")
