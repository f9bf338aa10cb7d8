import pytest

from pgmq_client.client.base import validate_queue_list, validate_queue_mapping, validate_queue_name
from pgmq_client.core.errors import InvalidQueueNameError


@pytest.mark.parametrize("name", ["orders", "_private", "Queue_2", "a" * 47])
def test_valid_queue_names(name):
    validate_queue_name(name)


@pytest.mark.parametrize("name, message", [
    (None, "cannot be empty"),
    ("", "cannot be empty"),
    ("   ", "cannot be empty"),
    ("a" * 48, "exceeds maximum length of 48 characters"),
    ("1orders", "must start with a letter or underscore"),
    ("orders-dlq", "must start with a letter or underscore"),
    ("orders'; DROP TABLE x; --", "must start with a letter or underscore"),
])
def test_invalid_queue_names(name, message):
    with pytest.raises(InvalidQueueNameError, match=message):
        validate_queue_name(name)


def test_queue_list_rules():
    with pytest.raises(TypeError):
        validate_queue_list(("orders",))
    with pytest.raises(ValueError):
        validate_queue_list([])
    with pytest.raises(ValueError):
        validate_queue_list([f"q{i}" for i in range(51)])
    with pytest.raises(InvalidQueueNameError):
        validate_queue_list(["orders", "bad-name"])
    validate_queue_list([f"q{i}" for i in range(50)])


def test_queue_mapping_rules():
    with pytest.raises(TypeError):
        validate_queue_mapping([("orders", [1])], "deletions")
    with pytest.raises(InvalidQueueNameError):
        validate_queue_mapping({"bad name": [1]}, "deletions")
