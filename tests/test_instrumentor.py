import json
import threading

import pytest

from remcengine.instrumentor import (
    InstrumentationTimer,
    Instrumentor,
    ProfileResult,
    cleanup_output_string,
    profile_function,
    profile_scope,
)


def _read(path):
    return json.loads(path.read_text(encoding="utf-8"))


@pytest.fixture
def shared():
    inst = Instrumentor.get()
    inst.end_session()
    yield inst
    inst.end_session()


def test_get_returns_same_instance(shared, tmp_path):
    shared.begin_session("Shared", tmp_path / "trace.json")
    again = Instrumentor.get()
    assert again is shared
    assert again.current_session.name == "Shared"


def test_empty_session_is_valid_json(tmp_path):
    inst = Instrumentor()
    path = tmp_path / "trace.json"
    inst.begin_session("Empty", path)
    assert inst.current_session.name == "Empty"
    inst.end_session()
    data = _read(path)
    assert data == {"otherData": {}, "traceEvents": [{}]}
    assert inst.current_session is None


def test_write_profile_fields(tmp_path):
    inst = Instrumentor()
    path = tmp_path / "trace.json"
    inst.begin_session("S", path)
    inst.write_profile(ProfileResult("draw", 12.5, 7, 42))
    inst.end_session()
    text = path.read_text(encoding="utf-8")
    assert '"ts":12.500' in text
    event = _read(path)["traceEvents"][1]
    assert event == {
        "cat": "function",
        "dur": 7,
        "name": "draw",
        "ph": "X",
        "pid": 0,
        "tid": 42,
        "ts": 12.5,
    }


def test_write_without_session_writes_nothing(tmp_path):
    inst = Instrumentor()
    path = tmp_path / "trace.json"
    inst.begin_session("S", path)
    inst.end_session()
    inst.write_profile(ProfileResult("late", 0.0, 1, 1))
    assert len(_read(path)["traceEvents"]) == 1


def test_second_begin_closes_first(tmp_path):
    inst = Instrumentor()
    first = tmp_path / "a.json"
    second = tmp_path / "b.json"
    inst.begin_session("A", first)
    inst.begin_session("B", second)
    assert inst.current_session.name == "B"
    inst.write_profile(ProfileResult("x", 1.0, 1, 1))
    inst.end_session()
    assert len(_read(first)["traceEvents"]) == 1
    assert len(_read(second)["traceEvents"]) == 2


def test_unopenable_file_leaves_no_session(tmp_path):
    inst = Instrumentor()
    inst.begin_session("Bad", tmp_path / "missing" / "dir" / "trace.json")
    assert inst.current_session is None


def test_timer_context_reports_once(tmp_path):
    inst = Instrumentor()
    path = tmp_path / "trace.json"
    inst.begin_session("S", path)
    with InstrumentationTimer("work", inst) as timer:
        pass
    assert timer.stopped
    inst.end_session()
    events = _read(path)["traceEvents"][1:]
    assert len(events) == 1
    assert events[0]["name"] == "work"
    assert events[0]["dur"] >= 0
    assert events[0]["tid"] == threading.get_ident()


def test_timer_stop_returns_result(tmp_path):
    inst = Instrumentor()
    timer = InstrumentationTimer("manual", inst)
    result = timer.stop()
    assert result.name == "manual"
    assert result.elapsed_time >= 0
    assert timer.stopped


def test_cleanup_removes_calling_convention():
    expr = "void __cdecl Sandbox2D::OnUpdate(Timestep)"
    assert cleanup_output_string(expr, "__cdecl ") == "void Sandbox2D::OnUpdate(Timestep)"


def test_cleanup_replaces_double_quotes():
    assert cleanup_output_string('say "hi"', "zz") == "say 'hi'"


def test_cleanup_copies_character_after_match():
    assert cleanup_output_string("abab", "ab") == "ab"


def test_cleanup_without_match_is_identity():
    assert cleanup_output_string("Renderer Draw", "__cdecl ") == "Renderer Draw"


def test_profile_scope_writes_to_shared(shared, tmp_path):
    path = tmp_path / "trace.json"
    shared.begin_session("S", path)
    with profile_scope("Renderer Prep"):
        pass
    shared.end_session()
    names = [e["name"] for e in _read(path)["traceEvents"][1:]]
    assert names == ["Renderer Prep"]


def test_profile_function_uses_qualname(shared, tmp_path):
    @profile_function
    def work(x):
        return x * 2

    path = tmp_path / "trace.json"
    shared.begin_session("S", path)
    assert work(21) == 42
    shared.end_session()
    names = [e["name"] for e in _read(path)["traceEvents"][1:]]
    assert names == [work.__qualname__]