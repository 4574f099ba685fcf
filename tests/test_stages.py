import pytest

from slowq_explain.errors import PlanExtractionError
from slowq_explain.explain import parse_explain

from .conftest import collscan_explain, ixscan_explain, sbe_group_explain


def test_execution_stats_tree_and_summary():
    result = parse_explain(ixscan_explain())

    assert result.root.stage == "FETCH"
    assert [child.stage for child in result.root.children] == ["IXSCAN"]
    assert result.root.children[0].index_name == "status_1"
    assert result.summary.total_docs_examined == 3
    assert result.summary.docs_returned == 3
    assert result.summary.has_execution_stats


def test_fan_in_and_sharded_children_become_one_list():
    document = {
        "executionStats": {
            "executionStages": {
                "stage": "SHARD_MERGE",
                "shards": [
                    {"shardName": "s0", "executionStages": {"stage": "COLLSCAN"}},
                    {
                        "shardName": "s1",
                        "executionStages": {
                            "stage": "OR",
                            "inputStages": [
                                {"stage": "IXSCAN", "indexName": "a_1"},
                                {"stage": "IXSCAN", "indexName": "b_1"},
                            ],
                        },
                    },
                ],
            }
        }
    }
    root = parse_explain(document).root
    assert [child.stage for child in root.children] == ["COLLSCAN", "OR"]
    assert [child.index_name for child in root.children[1].children] == ["a_1", "b_1"]


def test_aggregation_cursor_stage_is_unwrapped():
    inner = collscan_explain()
    document = {
        "stages": [
            {"$cursor": {"queryPlanner": inner["queryPlanner"], "executionStats": inner["executionStats"]}},
            {"$group": {"_id": "$status"}},
        ]
    }
    result = parse_explain(document)
    assert result.root.stage == "COLLSCAN"
    assert result.summary.total_docs_examined == 50000


def test_query_planner_only_output_has_no_counters():
    document = {"queryPlanner": {"winningPlan": {"queryPlan": {"stage": "IXSCAN", "indexName": "x_1"}}}}
    result = parse_explain(document)
    assert result.root.index_name == "x_1"
    assert not result.summary.has_execution_stats
    assert result.summary.docs_returned is None


def test_non_numeric_counters_are_rejected():
    document = {"executionStats": {"totalDocsExamined": "lots", "executionStages": {"stage": "COLLSCAN"}}}
    with pytest.raises(PlanExtractionError):
        parse_explain(document)


def test_slot_based_plan_keeps_classic_tree_for_checks():
    result = parse_explain(sbe_group_explain())

    assert result.root.stage == "project"
    assert result.plan_tree.stage == "GROUP"
    assert [child.stage for child in result.plan_tree.children] == ["COLLSCAN"]
    assert result.summary.total_docs_examined == 50000


def test_classic_plan_tree_is_the_executed_tree():
    result = parse_explain(collscan_explain())
    assert result.plan_root is None
    assert result.plan_tree is result.root
