"""Tests for the search debouncer."""

from client.debounce import Debouncer

from conftest import FakeClock


def test_value_settles_after_quiet_period():
    clock = FakeClock()
    debouncer = Debouncer(delay=0.3, clock=clock)

    debouncer.push('ho')
    assert debouncer.value() == ''
    assert debouncer.is_pending()
    assert debouncer.raw == 'ho'

    clock.advance(0.4)
    assert debouncer.value() == 'ho'
    assert not debouncer.is_pending()


def test_each_keystroke_restarts_the_quiet_period():
    clock = FakeClock()
    debouncer = Debouncer(delay=0.3, clock=clock)

    debouncer.push('h')
    clock.advance(0.2)
    debouncer.push('ho')
    clock.advance(0.2)
    assert debouncer.value() == ''

    clock.advance(0.2)
    assert debouncer.value() == 'ho'


def test_flush_settles_immediately():
    debouncer = Debouncer(initial='old', delay=0.3, clock=FakeClock())
    debouncer.push('new')

    assert debouncer.flush() == 'new'
    assert debouncer.value() == 'new'
    assert not debouncer.is_pending()
