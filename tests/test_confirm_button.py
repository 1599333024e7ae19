from modules.confirm_button import ConfirmationLatch, ConfirmDeleteButton


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def test_latch_first_press_arms_second_confirms():
    clock = FakeClock()
    latch = ConfirmationLatch(3.0, clock)
    assert latch.press() is False
    assert latch.armed
    clock.advance(2.9)
    assert latch.press() is True
    assert not latch.armed


def test_latch_press_after_window_rearms():
    clock = FakeClock()
    latch = ConfirmationLatch(3.0, clock)
    latch.press()
    clock.advance(3.0)
    assert not latch.armed
    assert latch.press() is False
    assert latch.armed


def test_button_second_click_within_window_confirms():
    clock = FakeClock()
    button = ConfirmDeleteButton(timeout_ms=3000, clock=clock)
    deleted = []
    button.confirmed.connect(lambda: deleted.append(True))

    button.click()
    assert deleted == []
    assert button.armed
    assert button.text() == ConfirmDeleteButton.ARMED_TEXT

    clock.advance(1.5)
    button.click()
    assert deleted == [True]
    assert not button.armed
    assert button.text() == ConfirmDeleteButton.IDLE_TEXT


def test_button_click_after_timeout_rearms_instead_of_deleting():
    clock = FakeClock()
    button = ConfirmDeleteButton(timeout_ms=3000, clock=clock)
    deleted = []
    button.confirmed.connect(lambda: deleted.append(True))

    button.click()
    clock.advance(3.5)
    button.click()
    assert deleted == []
    assert button.armed


def test_button_disarm_resets_state():
    button = ConfirmDeleteButton(clock=FakeClock())
    button.click()
    button.disarm()
    assert not button.armed
    assert button.text() == ConfirmDeleteButton.IDLE_TEXT


def test_hiding_the_button_disarms():
    button = ConfirmDeleteButton(clock=FakeClock())
    button.show()
    button.click()
    assert button.armed
    button.hide()
    assert not button.armed


def test_each_button_has_its_own_window():
    clock = FakeClock()
    first = ConfirmDeleteButton(clock=clock)
    second = ConfirmDeleteButton(clock=clock)
    first.click()
    assert first.armed
    assert not second.armed
