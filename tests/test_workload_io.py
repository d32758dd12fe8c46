from pathlib import Path

import pytest

from scheduler_opt.workload_io import load_workload
from scheduler_opt.models import Process


def test_load_json(tmp_path: Path):
    p = tmp_path / "w.json"
    p.write_text('[{"pid":"A","name":"editor","arrival_time":0,"burst_time":3,"priority":1},'
                 '{"id":"B","arrival_time":1.5,"burst_time":2}]')
    procs = load_workload(p)
    assert isinstance(procs[0], Process)
    assert procs[0].label == "editor"
    assert procs[1].pid == "B"
    assert procs[1].label == "B"
    assert procs[1].priority is None
    assert procs[1].arrival_time == 1.5


def test_load_csv(tmp_path: Path):
    p = tmp_path / "w.csv"
    p.write_text("pid,arrival_time,burst_time,priority\nA,0,3,1\nB,1,2,\n")
    procs = load_workload(p)
    assert procs[0].pid == "A"
    assert procs[0].burst_time == 3
    assert procs[1].priority is None


def test_rejects_bad_entries(tmp_path: Path):
    p = tmp_path / "w.json"
    p.write_text('[{"pid":"A","burst_time":3}]')
    with pytest.raises(ValueError):
        load_workload(p)


def test_rejects_unknown_suffix(tmp_path: Path):
    p = tmp_path / "w.txt"
    p.write_text("")
    with pytest.raises(ValueError):
        load_workload(p)
