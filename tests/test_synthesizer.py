"""Tests for turning action outcomes into the reply text."""

from nest_assistant.models import ActionCall, ActionResult, ProjectList, ProjectSnapshot, Task
from nest_assistant.synthesizer import GENERIC_ACKNOWLEDGEMENT, synthesize


def test_success_line_names_the_entity():
    calls = [ActionCall(name="create_list", args={"name": "Testing"})]
    results = [ActionResult.ok(ProjectList(list_uid="l9", project_uid="p", name="Testing"))]

    assert synthesize(calls, results) == '✅ Created list "Testing"'


def test_success_without_entity_uses_plain_phrase():
    calls = [ActionCall(name="delete_task", args={"task_uid": "t1"})]
    results = [ActionResult.ok()]

    assert synthesize(calls, results) == "✅ Deleted task"


def test_mixed_outcomes_keep_call_order():
    calls = [
        ActionCall(name="create_task", args={"list_uid": "l1", "title": "A"}),
        ActionCall(name="archive_list", args={}),
        ActionCall(name="update_task", args={"task_uid": "t1"}),
    ]
    results = [
        ActionResult.ok(Task(task_uid="t5", list_uid="l1", title="A")),
        ActionResult.fail("Unknown function: archive_list"),
        ActionResult.fail("Task not found"),
    ]

    text = synthesize(calls, results)

    assert text == (
        '✅ Created task "A"\n\n'
        "❌ Failed operations:\n"
        "• archive_list: Unknown function: archive_list\n"
        "• update_task: Task not found"
    )


def test_project_data_refresh_is_not_reported():
    calls = [
        ActionCall(name="get_project_data"),
        ActionCall(name="delete_list", args={"list_uid": "l1"}),
    ]
    results = [ActionResult.ok(ProjectSnapshot(project_uid="p")), ActionResult.ok()]

    text = synthesize(calls, results)

    assert "get_project_data" not in text
    assert text == "✅ Deleted list"


def test_failed_project_data_is_reported():
    calls = [ActionCall(name="get_project_data")]
    results = [ActionResult.fail("service down")]

    assert "get_project_data: service down" in synthesize(calls, results)


def test_falls_back_to_model_text_then_generic():
    assert synthesize([], [], "You have 2 lists.") == "You have 2 lists."
    assert synthesize([], [], "  ") == GENERIC_ACKNOWLEDGEMENT
    assert synthesize([], []) == GENERIC_ACKNOWLEDGEMENT

    only_refresh = [ActionCall(name="get_project_data")]
    assert synthesize(only_refresh, [ActionResult.ok()], "") == GENERIC_ACKNOWLEDGEMENT


def test_failure_without_error_text():
    calls = [ActionCall(name="delete_list", args={"list_uid": "l1"})]

    assert synthesize(calls, [ActionResult(success=False)]).endswith("• delete_list: Unknown error")


def test_deletes_are_named_from_the_snapshot():
    snapshot = ProjectSnapshot(
        project_uid="p",
        lists=[
            ProjectList(
                list_uid="l1",
                project_uid="p",
                name="Backend",
                tasks=[Task(task_uid="t1", list_uid="l1", title="Implement auth")],
            ),
        ],
    )
    calls = [
        ActionCall(name="delete_task", args={"task_uid": "t1"}),
        ActionCall(name="delete_list", args={"list_uid": "l1"}),
        ActionCall(name="delete_task", args={"task_uid": "gone"}),
    ]
    results = [ActionResult.ok(), ActionResult.ok(), ActionResult.ok()]

    text = synthesize(calls, results, snapshot=snapshot)

    assert text == '✅ Deleted task "Implement auth"\n✅ Deleted list "Backend"\n✅ Deleted task'
