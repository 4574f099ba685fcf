import json

from pymongo.errors import AutoReconnect

from slowq_explain.analysis import BatchOutcome
from slowq_explain.cli.explain import _run_explain


class ScriptedAssembler:
    def __init__(self, outcomes):
        self.outcomes = outcomes

    def diagnose_many(self, query_ids):
        return self.outcomes


def test_failed_item_is_reported_not_raised(capsys):
    assembler = ScriptedAssembler([BatchOutcome("abc", error=AutoReconnect("connection reset"))])

    assert _run_explain(assembler, ["abc"]) == 1
    payload = json.loads(capsys.readouterr().out)
    assert payload == {
        "query_id": "abc",
        "success": False,
        "error": "AutoReconnect",
        "message": "connection reset",
    }


def test_outcome_without_response_or_error_is_skipped(capsys):
    assembler = ScriptedAssembler(
        [BatchOutcome("abc", error=AutoReconnect("down")), BatchOutcome("def")]
    )

    assert _run_explain(assembler, ["abc", "def"]) == 1
    payload = json.loads(capsys.readouterr().out)
    assert payload["query_id"] == "abc"
