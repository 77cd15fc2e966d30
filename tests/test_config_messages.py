# tests/test_config_messages.py
import pickle

import pytest

from sudoku_workers.config import SolverConfig
from sudoku_workers.messages import (
    ASSIGN_TAGS,
    RESULT_TAGS,
    TAG_ROUND,
    Assignment,
    CandidateResult,
    RoundSignal,
    describe,
)
from sudoku_workers.solver_core import CandidateSet, UnitKind


def test_config_defaults():
    cfg = SolverConfig()
    assert cfg.transport == "process"
    assert cfg.sync == "pass"
    assert cfg.max_passes is None


@pytest.mark.parametrize("kwargs", [
    {"transport": "carrier-pigeon"},
    {"sync": "never"},
    {"message_timeout": 0},
    {"max_passes": 0},
])
def test_config_rejects_bad_values(kwargs):
    with pytest.raises(ValueError):
        SolverConfig(**kwargs)


def test_config_replace_ignores_none():
    cfg = SolverConfig().replace(transport="thread", sync=None)
    assert cfg.transport == "thread"
    assert cfg.sync == "pass"


def test_config_from_env():
    cfg = SolverConfig.from_env({
        "SUDOKU_WORKERS_TRANSPORT": "Thread",
        "SUDOKU_WORKERS_SYNC": "cell",
        "SUDOKU_WORKERS_TIMEOUT": "2.5",
    })
    assert (cfg.transport, cfg.sync, cfg.message_timeout, cfg.barrier_timeout) == ("thread", "cell", 2.5, 2.5)
    assert SolverConfig.from_env({}) == SolverConfig()


def test_tags_are_distinct_per_direction_and_kind():
    tags = list(ASSIGN_TAGS.values()) + list(RESULT_TAGS.values()) + [TAG_ROUND]
    assert len(set(tags)) == len(tags)
    assert Assignment(UnitKind.COL, 0, (0, 0), (0,) * 9).tag == 2
    assert CandidateResult(UnitKind.BOX, 0, (0, 0), CandidateSet()).tag == 6


def test_messages_survive_pickling():
    msgs = [
        Assignment(UnitKind.ROW, 3, (2, 7), (4, 0, 5, 1, 9, 0, 0, 6, 7)),
        CandidateResult(UnitKind.BOX, 3, (2, 7), CandidateSet.of([2, 3, 8])),
        RoundSignal(3, solved=False, final=True),
    ]
    for msg in msgs:
        copy = pickle.loads(pickle.dumps(msg))
        assert copy == msg
        assert copy.tag == msg.tag
    assert pickle.loads(pickle.dumps(UnitKind.ROW)) is UnitKind.ROW


def test_describe():
    assert describe(RoundSignal(1, True)).startswith("[tag 7] round epoch=1")
    assert describe(42) == "untagged int"
