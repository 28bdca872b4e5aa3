"""Tests for the action schema registry."""

from nest_assistant.models import ActionType
from nest_assistant.tools import ALL_TOOLS, ACTION_SCHEMAS, describe_actions, lookup_action, required_parameters


def test_registry_is_the_closed_action_set():
    assert {t.name for t in ALL_TOOLS} == {a.value for a in ActionType}
    assert set(ACTION_SCHEMAS) == set(ActionType)


def test_lookup_action():
    assert lookup_action("create_task") is ActionType.CREATE_TASK
    assert lookup_action("archive_list") is None


def test_required_parameters():
    assert required_parameters(ActionType.CREATE_LIST) == ["name"]
    assert required_parameters(ActionType.UPDATE_LIST) == ["list_uid"]
    assert required_parameters(ActionType.DELETE_LIST) == ["list_uid"]
    assert required_parameters(ActionType.CREATE_TASK) == ["list_uid", "title"]
    assert required_parameters(ActionType.UPDATE_TASK) == ["task_uid"]
    assert required_parameters(ActionType.DELETE_TASK) == ["task_uid"]
    assert required_parameters(ActionType.MOVE_TASK) == ["task_uid", "target_list_uid"]
    assert required_parameters(ActionType.GET_PROJECT_DATA) == []


def test_describe_actions():
    descriptors = {d["name"]: d for d in describe_actions()}
    assert len(descriptors) == len(ActionType)

    create_task = descriptors["create_task"]
    assert "Create a new task" in create_task["description"]
    params = {p["name"]: p for p in create_task["parameters"]}
    assert params["title"]["required"] is True
    assert params["title"]["type"] == "string"
    assert params["priority"]["required"] is False
    assert params["position"]["type"] == "integer"

    assert descriptors["get_project_data"]["parameters"] == []
