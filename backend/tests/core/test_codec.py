"""Unit tests for the entity codec - pure functions, no mocks needed."""

import json

import pytest

from evolvefit.core.codec import (
    decode_entity,
    decode_list,
    decode_map,
    encode_entity,
    encode_list,
    encode_map,
)
from evolvefit.core.errors import ErrorKind, MalformedStoredValue
from evolvefit.core.models import AccountRecord, Contest, DailyLog, TrainingContext


class TestEncode:
    """Tests for the encoders."""

    def test_map_is_json_object(self):
        """Maps serialize to a JSON object keyed like the input."""
        text = encode_map({"2025-03-14": DailyLog(date="2025-03-14")}, DailyLog)

        data = json.loads(text)
        assert list(data) == ["2025-03-14"]
        assert data["2025-03-14"]["meals"] == []

    def test_list_keeps_order(self):
        text = encode_list([Contest(id=2, title="B"), Contest(id=1, title="A")], Contest)
        assert [c["id"] for c in json.loads(text)] == [2, 1]


class TestDecode:
    """Tests for the decoders."""

    def test_map_back_to_models(self):
        accounts = {"user_1": AccountRecord(id="user_1", email="a@x.com")}

        decoded = decode_map("users", encode_map(accounts, AccountRecord), AccountRecord)

        assert decoded["user_1"].email == "a@x.com"

    def test_entity_back_to_model(self):
        context = TrainingContext(split="Push", environment="Gym")
        assert decode_entity("ctx", encode_entity(context), TrainingContext) == context

    def test_invalid_json_raises_malformed(self):
        """Unparseable text raises MalformedStoredValue naming the key."""
        with pytest.raises(MalformedStoredValue) as exc:
            decode_map("evolvefit_db_users", "{not json", AccountRecord)

        assert exc.value.kind == ErrorKind.MALFORMED_STORED_VALUE
        assert exc.value.key == "evolvefit_db_users"

    def test_wrong_shape_raises_malformed(self):
        """A list where a map is expected is corrupt, not empty."""
        with pytest.raises(MalformedStoredValue):
            decode_map("logs", "[]", DailyLog)

    def test_invalid_record_raises_malformed(self):
        with pytest.raises(MalformedStoredValue):
            decode_list("contests", '[{"id": 1}]', Contest)
