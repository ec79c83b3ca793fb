"""
Tests for the reactive update channel

Tests the Datastar events written for each emission, emission order and
closed channel behavior.
"""

import json
import threading

from rcpanel.update_channel import PatchMode, UpdateChannel


def _channel():
    frames = []
    return UpdateChannel(frames.append), frames


def _lines(frame: str) -> list:
    return frame.strip("\n").split("\n")


def _signals(frame: str) -> dict:
    payload = [line[len("data: signals "):] for line in _lines(frame) if line.startswith("data: signals ")]
    return json.loads("".join(payload))


def test_patch_elements_by_id():
    """Test a fragment patch addressed to an element id"""
    sse, frames = _channel()

    assert sse.patch_html_by_id("list", '<ul id="list">\n<li>a</li>\n</ul>')

    lines = _lines(frames[0])
    assert len(frames) == 1
    assert frames[0].endswith("\n\n")
    assert lines[0] == "event: datastar-patch-elements"
    assert "data: selector #list" in lines
    assert [line for line in lines if line.startswith("data: elements ")] == [
        'data: elements <ul id="list">',
        "data: elements <li>a</li>",
        "data: elements </ul>",
    ]


def test_patch_modes():
    """Test that non-default modes are written and the default is omitted"""
    sse, frames = _channel()

    sse.append_by_id("rows", "<tr></tr>")
    sse.prepend_by_id("rows", "<tr></tr>")
    sse.patch_elements("<div></div>", selector="#x", mode=PatchMode.INNER, use_view_transition=True)
    sse.patch_elements('<div id="y"></div>')

    assert "data: mode append" in _lines(frames[0])
    assert "data: mode prepend" in _lines(frames[1])
    assert "data: mode inner" in _lines(frames[2])
    assert "data: useViewTransition true" in _lines(frames[2])
    assert "data: mode" not in frames[3]
    assert "data: selector" not in frames[3]


def test_patch_then_remove_keeps_order():
    """Test events are delivered in emission order"""
    sse, frames = _channel()

    sse.patch_html_by_id("list", '<ul id="list"></ul>')
    sse.remove_by_id("row-3")

    assert len(frames) == 2
    assert "data: selector #list" in _lines(frames[0])
    assert _lines(frames[1])[0] == "event: datastar-patch-elements"
    assert "data: selector #row-3" in _lines(frames[1])
    assert "data: mode remove" in _lines(frames[1])
    assert sse.events_sent == 2


def test_patch_signals():
    """Test signal patches with and without onlyIfMissing"""
    sse, frames = _channel()

    sse.patch_signals({"stats": {"bytes": 5}})
    sse.patch_signals({"path": ""}, only_if_missing=True)

    assert _lines(frames[0])[0] == "event: datastar-patch-signals"
    assert _signals(frames[0]) == {"stats": {"bytes": 5}}
    assert "onlyIfMissing" not in frames[0]
    assert "data: onlyIfMissing true" in _lines(frames[1])
    assert _signals(frames[1]) == {"path": ""}


def test_execute_script():
    """Test scripts are appended to the body"""
    sse, frames = _channel()

    sse.execute_script("doThing()")
    sse.execute_script("keep()", auto_remove=False)

    assert "data: selector body" in _lines(frames[0])
    assert "data: mode append" in _lines(frames[0])
    assert "<script" in frames[0]
    assert "doThing()" in frames[0]
    assert "keep()" in frames[1]


def test_alert_and_navigate_escape_strings():
    """Test that messages are embedded as safe JavaScript string literals"""
    sse, frames = _channel()

    sse.alert('Copied "a"</script>')
    sse.navigate("/jobs")
    sse.console_log("done")

    assert 'alert("Copied \\"a\\"<\\/script>")' in frames[0]
    assert "window.location" in frames[1]
    assert "/jobs" in frames[1]
    assert 'console.log("done")' in frames[2]


def test_closed_channel_drops_events():
    """Test that nothing is written after close"""
    sse, frames = _channel()
    sse.close()

    assert sse.is_closed()
    assert not sse.patch_html_by_id("list", "<ul></ul>")
    assert not sse.remove("#row")
    assert not sse.patch_signals({"a": 1})
    assert frames == []
    assert sse.events_sent == 0


def test_disconnected_peer_drops_events():
    """Test that the liveness check runs before every emission"""
    frames = []
    gone = threading.Event()
    sse = UpdateChannel(frames.append, is_disconnected=gone.is_set)

    assert sse.patch_elements('<p id="a"></p>')
    gone.set()
    assert not sse.patch_elements('<p id="b"></p>')

    assert len(frames) == 1
    assert sse.is_closed()


def test_concurrent_emitters_write_whole_events():
    """Test events from several threads are never interleaved"""
    sse, frames = _channel()

    def emit(worker):
        for i in range(50):
            sse.patch_html_by_id(f"w{worker}", f'<p id="w{worker}">{i}</p>')

    threads = [threading.Thread(target=emit, args=(n,)) for n in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(frames) == 200
    assert sse.events_sent == 200
    assert all(frame.startswith("event: datastar-patch-elements") for frame in frames)
