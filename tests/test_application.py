"""Tests for cellview.application -- the draw loop and input dispatch."""

from __future__ import annotations

import asyncio
import threading
from typing import Callable

import pytest

from cellview.application import Application
from cellview.components import TextView
from cellview.config import AppConfig
from cellview.errors import CellviewError, ScreenError
from cellview.keys import KeyEvent
from cellview.layout import Rect
from cellview.mouse import MouseAction, MouseEvent
from cellview.primitive import Primitive, SetFocus, Widget
from cellview.screen import ScreenBuffer

from .virtual_terminal import VirtualTerminal


class Recorder(Widget):
    """Records the keys and mouse actions it receives."""

    def __init__(self) -> None:
        super().__init__()
        self.keys: list[KeyEvent] = []
        self.mouse: list[MouseAction] = []

    def on_key(self, event: KeyEvent, set_focus: SetFocus) -> bool:
        self.keys.append(event)
        return True

    def on_mouse(
        self, event: MouseEvent, set_focus: SetFocus
    ) -> tuple[bool, Primitive | None]:
        self.mouse.append(event.action)
        return True, None


async def _until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    async def poll() -> None:
        while not predicate():
            await asyncio.sleep(0.005)

    await asyncio.wait_for(poll(), timeout)


async def _start(app: Application) -> asyncio.Task:
    task = asyncio.create_task(app.run_async())
    await _until(lambda: app.draw_count >= 1)
    return task


def _app(rows: int = 5, columns: int = 20, **config) -> tuple[Application, VirtualTerminal]:
    terminal = VirtualTerminal(rows, columns)
    return Application(terminal=terminal, config=AppConfig(**config)), terminal


# ---------------------------------------------------------------------------
# Lifecycle and drawing
# ---------------------------------------------------------------------------


class TestLifecycle:
    """Starting, drawing and stopping."""

    @pytest.mark.asyncio
    async def test_first_draw_paints_everything(self) -> None:
        app, terminal = _app()
        view = TextView()
        view.set_text("hello")
        app.set_root(view)
        task = await _start(app)
        assert terminal.started
        assert app.screen.full_redraws == 1
        assert "hello" in terminal.output
        assert view.get_rect() == Rect(0, 0, 20, 5)
        app.stop()
        await asyncio.wait_for(task, 2)
        assert not terminal.started
        assert not app.running

    @pytest.mark.asyncio
    async def test_running_twice_is_an_error(self) -> None:
        app, _ = _app()
        task = await _start(app)
        with pytest.raises(CellviewError):
            await app.run_async()
        app.stop()
        await asyncio.wait_for(task, 2)

    @pytest.mark.asyncio
    async def test_queue_update_draw_redraws(self) -> None:
        app, terminal = _app()
        view = TextView()
        app.set_root(view)
        task = await _start(app)
        count = app.draw_count
        app.queue_update_draw(lambda: view.set_text("later"))
        await _until(lambda: app.draw_count > count)
        assert "later" in terminal.output
        app.stop()
        await asyncio.wait_for(task, 2)

    @pytest.mark.asyncio
    async def test_resize_forces_full_redraw(self) -> None:
        app, terminal = _app()
        root = Recorder()
        app.set_root(root)
        task = await _start(app)
        before = app.screen.full_redraws
        terminal.simulate_resize(rows=10, columns=30)
        await _until(lambda: app.screen.full_redraws > before)
        assert app.screen.size() == (30, 10)
        assert root.get_rect() == Rect(0, 0, 30, 10)
        app.stop()
        await asyncio.wait_for(task, 2)

    @pytest.mark.asyncio
    async def test_draw_hooks(self) -> None:
        app, terminal = _app()
        app.set_root(TextView())

        def after(buffer: ScreenBuffer) -> None:
            buffer.set_content(0, 0, "@")

        app.set_after_draw(after)
        task = await _start(app)
        assert "@" in terminal.output

        count = app.draw_count
        skipped: list[bool] = []

        def before(buffer: ScreenBuffer) -> bool:
            skipped.append(True)
            return True

        app.set_before_draw(before)
        app.request_draw()
        await _until(lambda: bool(skipped))
        assert app.draw_count == count
        app.stop()
        await asyncio.wait_for(task, 2)

    @pytest.mark.asyncio
    async def test_write_failure_surfaces_screen_error(self) -> None:
        app, terminal = _app()
        app.set_root(TextView())
        task = await _start(app)
        terminal.fail_writes = True
        app.request_draw()
        with pytest.raises(ScreenError):
            await asyncio.wait_for(task, 2)
        assert not terminal.started

    @pytest.mark.asyncio
    async def test_failed_terminal_start_is_undone(self) -> None:
        terminal = HalfStartingTerminal(5, 20)
        app = Application(terminal=terminal, config=AppConfig())
        with pytest.raises(ScreenError):
            await app.run_async()
        assert not terminal.raw
        assert not app.running
        assert app.draw_count == 0


class HalfStartingTerminal(VirtualTerminal):
    """Enters raw mode, then fails before input is wired up."""

    def __init__(self, rows: int, columns: int) -> None:
        super().__init__(rows, columns)
        self.raw = False

    def start(self, on_input: Callable[[str], None], on_resize: Callable[[], None]) -> None:
        self.raw = True
        raise ScreenError("cannot read from terminal")

    def stop(self) -> None:
        self.raw = False
        super().stop()


# ---------------------------------------------------------------------------
# Update queue
# ---------------------------------------------------------------------------


class TestQueueUpdate:
    """Closures from other threads run on the loop, in order, once each."""

    @pytest.mark.asyncio
    async def test_concurrent_updates(self) -> None:
        app, _ = _app()
        task = await _start(app)
        seen: list[tuple[int, int]] = []
        loop_thread = threading.get_ident()
        threads_seen: set[int] = set()

        def record(worker: int, n: int) -> None:
            threads_seen.add(threading.get_ident())
            seen.append((worker, n))

        def produce(worker: int) -> None:
            for n in range(100):
                app.queue_update(lambda n=n: record(worker, n))

        threads = [threading.Thread(target=produce, args=(w,)) for w in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        await _until(lambda: len(seen) == 1000)
        app.stop()
        await asyncio.wait_for(task, 2)

        assert len(seen) == len(set(seen)) == 1000
        for worker in range(10):
            assert [n for w, n in seen if w == worker] == list(range(100))
        assert threads_seen == {loop_thread}

    @pytest.mark.asyncio
    async def test_stop_from_inside_update(self) -> None:
        app, _ = _app()
        task = await _start(app)
        ran: list[str] = []

        def first() -> None:
            ran.append("first")
            app.stop()

        app.queue_update(first)
        app.queue_update(lambda: ran.append("second"))
        await asyncio.wait_for(task, 2)
        assert ran == ["first"]

    @pytest.mark.asyncio
    async def test_exception_in_update_is_reraised(self) -> None:
        app, terminal = _app()
        task = await _start(app)

        def boom() -> None:
            raise RuntimeError("boom")

        app.queue_update(boom)
        with pytest.raises(RuntimeError, match="boom"):
            await asyncio.wait_for(task, 2)
        assert not terminal.started


# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------


class TestInput:
    """Keys, paste, mouse and modal layers."""

    @pytest.mark.asyncio
    async def test_keys_reach_focused_widget(self) -> None:
        app, terminal = _app()
        root = Recorder()
        app.set_root(root)
        task = await _start(app)
        terminal.simulate_input("a")
        terminal.simulate_input("\x1b[A")
        assert [e.key for e in root.keys] == ["a", "up"]
        app.stop()
        await asyncio.wait_for(task, 2)

    @pytest.mark.asyncio
    async def test_paste(self) -> None:
        app, terminal = _app()
        root = Recorder()
        app.set_root(root)
        task = await _start(app)
        terminal.simulate_input("\x1b[200~two\nlines")
        assert root.keys == [KeyEvent.paste("two\nlines")]
        app.stop()
        await asyncio.wait_for(task, 2)

    @pytest.mark.asyncio
    async def test_ctrl_c_stops(self) -> None:
        app, terminal = _app()
        root = Recorder()
        app.set_root(root)
        task = await _start(app)
        terminal.simulate_input("\x03")
        await asyncio.wait_for(task, 2)
        assert root.keys == []

    @pytest.mark.asyncio
    async def test_input_capture_sees_ctrl_c_first(self) -> None:
        app, terminal = _app()
        root = Recorder()
        app.set_root(root)
        captured: list[str] = []

        def capture(event: KeyEvent) -> KeyEvent | None:
            captured.append(event.key)
            if event.matches("ctrl+c"):
                return None
            return KeyEvent("x", "x") if event.matches("y") else event

        app.set_input_capture(capture)
        task = await _start(app)
        terminal.simulate_input("\x03")
        terminal.simulate_input("y")
        assert app.running
        assert captured == ["ctrl+c", "y"]
        assert [e.key for e in root.keys] == ["x"]
        app.stop()
        await asyncio.wait_for(task, 2)

    @pytest.mark.asyncio
    async def test_modal_takes_and_returns_focus(self) -> None:
        app, terminal = _app()
        root, dialog = Recorder(), Recorder()
        app.set_root(root)
        task = await _start(app)
        app.show_modal(dialog)
        terminal.simulate_input("a")
        app.hide_modal(dialog)
        terminal.simulate_input("b")
        assert [e.key for e in dialog.keys] == ["a"]
        assert [e.key for e in root.keys] == ["b"]
        assert app.get_focus() is root
        app.stop()
        await asyncio.wait_for(task, 2)

    @pytest.mark.asyncio
    async def test_mouse(self) -> None:
        app, terminal = _app(mouse=True)
        root = Recorder()
        app.set_root(root)
        task = await _start(app)
        assert terminal.mouse_enabled
        terminal.simulate_input("\x1b[<0;3;2M")
        terminal.simulate_input("\x1b[<0;3;2m")
        assert root.mouse == [MouseAction.LEFT_DOWN, MouseAction.LEFT_UP, MouseAction.LEFT_CLICK]

        app.enable_mouse(False)
        terminal.simulate_input("\x1b[<0;3;2M")
        assert not terminal.mouse_enabled
        assert len(root.mouse) == 3
        app.stop()
        await asyncio.wait_for(task, 2)

    @pytest.mark.asyncio
    async def test_unknown_input_is_ignored(self) -> None:
        app, terminal = _app()
        root = Recorder()
        app.set_root(root)
        task = await _start(app)
        terminal.simulate_input("\x1b[999~")
        assert root.keys == []
        assert app.running
        app.stop()
        await asyncio.wait_for(task, 2)
