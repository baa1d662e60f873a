"""入站数据校验测试"""

import pytest

from taskpilot.core.exceptions import ValidationError
from taskpilot.core.models import TaskStatus
from taskpilot.core.validation import (
    validate_create,
    validate_list_query,
    validate_update,
)


class TestValidateCreate:
    """创建任务输入校验"""

    def test_minimal(self):
        data = validate_create({"title": "Buy milk"})
        assert data.title == "Buy milk"
        assert data.notes is None
        assert data.priority is None
        assert data.due_date is None

    def test_full_camel_case(self):
        data = validate_create(
            {
                "title": "Write report",
                "notes": "Q3 numbers",
                "priority": 1,
                "dueDate": "2030-05-01T17:00:00Z",
            }
        )
        assert data.notes == "Q3 numbers"
        assert data.priority == 1
        assert data.due_date == "2030-05-01T17:00:00Z"

    def test_datetime_local_format_accepted(self):
        """浏览器 datetime-local 格式（无秒、无时区）"""
        data = validate_create({"title": "t", "dueDate": "2030-05-01T17:00"})
        assert data.due_date == "2030-05-01T17:00"

    def test_unknown_fields_ignored(self):
        data = validate_create({"title": "t", "status": "done", "id": "x"})
        assert not hasattr(data, "status")

    def test_null_optional_fields_treated_as_absent(self):
        data = validate_create({"title": "t", "notes": None, "priority": None})
        assert data.notes is None
        assert data.priority is None

    @pytest.mark.parametrize(
        "payload, field",
        [
            ({}, "title"),
            ({"title": ""}, "title"),
            ({"title": "x" * 201}, "title"),
            ({"title": 123}, "title"),
            ({"title": "t", "notes": "x" * 1001}, "notes"),
            ({"title": "t", "priority": 0}, "priority"),
            ({"title": "t", "priority": 4}, "priority"),
            ({"title": "t", "priority": "1"}, "priority"),
            ({"title": "t", "priority": 1.5}, "priority"),
            ({"title": "t", "dueDate": "2030-05-01"}, "dueDate"),
            ({"title": "t", "dueDate": "tomorrow"}, "dueDate"),
        ],
    )
    def test_invalid_inputs(self, payload, field):
        with pytest.raises(ValidationError) as exc_info:
            validate_create(payload)
        assert exc_info.value.fields == [field]
        assert field in str(exc_info.value)

    def test_title_boundary_lengths(self):
        assert validate_create({"title": "x"}).title == "x"
        assert len(validate_create({"title": "x" * 200}).title) == 200

    @pytest.mark.parametrize("payload", [None, [], "title", 42])
    def test_non_object_body(self, payload):
        with pytest.raises(ValidationError) as exc_info:
            validate_create(payload)
        assert exc_info.value.fields == ["body"]

    def test_multiple_violations_listed(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_create({"title": "", "priority": 9})
        assert set(exc_info.value.fields) == {"title", "priority"}


class TestValidateUpdate:
    """更新任务输入校验"""

    def test_empty_object_has_no_changes(self):
        data = validate_update({})
        assert data.changes() == {}

    def test_only_present_fields_in_changes(self):
        data = validate_update({"status": "done"})
        assert data.changes() == {"status": TaskStatus.DONE}

    def test_explicit_null_clears_optional_field(self):
        data = validate_update({"notes": None, "dueDate": None})
        assert data.changes() == {"notes": None, "due_date": None}

    def test_enhanced_description_accepted(self):
        data = validate_update({"enhancedDescription": "{}"})
        assert data.changes() == {"enhanced_description": "{}"}

    @pytest.mark.parametrize(
        "payload, field",
        [
            ({"title": None}, "title"),
            ({"title": ""}, "title"),
            ({"status": None}, "status"),
            ({"status": "archived"}, "status"),
            ({"priority": 5}, "priority"),
            ({"enhancedDescription": "x" * 5001}, "enhancedDescription"),
        ],
    )
    def test_invalid_inputs(self, payload, field):
        with pytest.raises(ValidationError) as exc_info:
            validate_update(payload)
        assert exc_info.value.fields == [field]


class TestValidateListQuery:
    """列表查询参数校验"""

    def test_empty_query(self):
        query = validate_list_query({})
        assert query.status is None
        assert query.priority is None
        assert query.q is None

    def test_empty_strings_treated_as_absent(self):
        query = validate_list_query({"status": "", "priority": "", "q": ""})
        assert query.status is None
        assert query.priority is None
        assert query.q is None

    def test_parses_priority_string(self):
        query = validate_list_query({"status": "open", "priority": "2", "q": "milk"})
        assert query.status == TaskStatus.OPEN
        assert query.priority == 2
        assert query.q == "milk"

    @pytest.mark.parametrize(
        "params, field",
        [
            ({"status": "archived"}, "status"),
            ({"priority": "high"}, "priority"),
            ({"priority": "7"}, "priority"),
        ],
    )
    def test_invalid_params(self, params, field):
        with pytest.raises(ValidationError) as exc_info:
            validate_list_query(params)
        assert exc_info.value.fields == [field]
