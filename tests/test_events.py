import pytest

from remcengine.events import (
    AppTickEvent,
    EventCategory,
    EventDispatcher,
    EventType,
    InputState,
    Key,
    KeyPressedEvent,
    KeyReleasedEvent,
    KeyTypedEvent,
    MouseButton,
    MouseButtonPressedEvent,
    MouseButtonReleasedEvent,
    MouseMovedEvent,
    MouseScrolledEvent,
    WindowCloseEvent,
    WindowResizeEvent,
)


def test_window_resize_text_and_size():
    event = WindowResizeEvent(1280, 720)
    assert str(event) == "WindowResizeEvent: 1280, 720"
    assert (event.width, event.height) == (1280, 720)
    assert event.event_type is EventType.WINDOW_RESIZE


def test_default_text_is_name():
    event = WindowCloseEvent()
    assert event.name == "WindowClose"
    assert str(event) == event.name
    assert str(AppTickEvent()) == "AppTick"


def test_key_pressed_text():
    event = KeyPressedEvent(Key.A, 3)
    assert str(event) == f"KeyPressedEvent: {int(Key.A)} (3 repeats)"
    assert event.repeat_count == 3


def test_key_released_and_typed_text():
    assert str(KeyReleasedEvent(Key.W)) == f"KeyReleasedEvent: {int(Key.W)}"
    assert str(KeyTypedEvent(Key.Q)) == f"KeyTypedEvent: {int(Key.Q)}"


def test_mouse_float_text():
    assert str(MouseMovedEvent(1.5, 2.0)) == "MouseMovedEvent: 1.5, 2"
    assert str(MouseScrolledEvent(0.5, -1.0)) == "MouseScrolledEvent: 0.5, -1"


def test_mouse_button_text():
    pressed = MouseButtonPressedEvent(MouseButton.RIGHT)
    released = MouseButtonReleasedEvent(MouseButton.MIDDLE)
    assert str(pressed) == f"MouseButtonPressedEvent: {int(MouseButton.RIGHT)}"
    assert str(released) == f"MouseButtonReleasedEvent: {int(MouseButton.MIDDLE)}"


@pytest.mark.parametrize(
    "event, inside, outside",
    [
        (KeyPressedEvent(Key.A, 0), [EventCategory.KEYBOARD, EventCategory.INPUT], [EventCategory.MOUSE]),
        (MouseMovedEvent(0.0, 0.0), [EventCategory.MOUSE, EventCategory.INPUT], [EventCategory.MOUSE_BUTTON]),
        (MouseButtonPressedEvent(MouseButton.LEFT), [EventCategory.MOUSE_BUTTON, EventCategory.MOUSE], [EventCategory.KEYBOARD]),
        (WindowResizeEvent(1, 1), [EventCategory.APPLICATION], [EventCategory.INPUT]),
    ],
)
def test_categories(event, inside, outside):
    assert all(event.is_in_category(c) for c in inside)
    assert not any(event.is_in_category(c) for c in outside)


def test_dispatch_matching_type_calls_handler():
    event = MouseScrolledEvent(0.0, 2.0)
    seen = []

    def handler(e):
        seen.append(e.y_offset)
        return True

    assert EventDispatcher(event).dispatch(MouseScrolledEvent, handler) is True
    assert seen == [2.0]
    assert event.handled is True


def test_dispatch_other_type_is_skipped():
    event = WindowCloseEvent()
    called = []
    result = EventDispatcher(event).dispatch(WindowResizeEvent, lambda e: called.append(e) or True)
    assert result is False
    assert called == []
    assert event.handled is False


def test_handled_is_sticky():
    event = WindowCloseEvent()
    dispatcher = EventDispatcher(event)
    dispatcher.dispatch(WindowCloseEvent, lambda e: True)
    dispatcher.dispatch(WindowCloseEvent, lambda e: False)
    assert event.handled is True


def test_input_state_keys_and_buttons():
    state = InputState()
    state.press_key(Key.LEFT_ALT)
    state.press_mouse_button(MouseButton.LEFT)
    assert state.is_key_pressed(Key.LEFT_ALT)
    assert state.is_mouse_button_pressed(MouseButton.LEFT)
    assert not state.is_key_pressed(Key.A)
    state.release_key(Key.LEFT_ALT)
    state.release_mouse_button(MouseButton.LEFT)
    assert not state.is_key_pressed(Key.LEFT_ALT)
    assert not state.is_mouse_button_pressed(MouseButton.LEFT)