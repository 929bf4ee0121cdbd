import threading
import unittest
from mealplan.logic.sync.debounce import DelayedTask


class FakeTimer:
    def __init__(self, interval, function, args=()):
        self.interval = interval
        self.function = function
        self.args = args
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.function(*self.args)


class TestDelayedTask(unittest.TestCase):
    def setUp(self):
        self.timers = []
        self.runs = []

        def factory(interval, function, args=()):
            t = FakeTimer(interval, function, args)
            self.timers.append(t)
            return t

        def callback(token):
            if self.task.claim(token):
                self.runs.append(token)

        self.task = DelayedTask(0.8, callback, factory)

    def test_schedule_starts_daemon_timer(self):
        self.task.schedule()
        self.assertTrue(self.task.pending)
        self.assertEqual(self.timers[0].interval, 0.8)
        self.assertTrue(self.timers[0].started and self.timers[0].daemon)

    def test_reschedule_cancels_previous(self):
        self.task.schedule()
        self.task.schedule()
        self.assertTrue(self.timers[0].cancelled)
        self.assertFalse(self.timers[1].cancelled)
        self.timers[1].fire()
        self.assertEqual(len(self.runs), 1)
        self.assertFalse(self.task.pending)

    def test_late_fire_after_cancel_is_ignored(self):
        self.task.schedule()
        self.assertTrue(self.task.cancel())
        self.timers[0].fire()
        self.assertEqual(self.runs, [])
        self.assertFalse(self.task.cancel(), "Nothing pending any more")

    def test_superseded_fire_is_ignored(self):
        self.task.schedule()
        self.task.schedule()
        self.timers[0].fire()
        self.assertEqual(self.runs, [])
        self.assertTrue(self.task.pending)

    def test_claim_only_once(self):
        token = self.task.schedule()
        self.assertTrue(self.task.claim(token))
        self.assertFalse(self.task.claim(token))

    def test_real_timer_runs(self):
        done = threading.Event()
        task = DelayedTask(0.01, lambda token: task.claim(token) and done.set())
        task.schedule()
        self.assertTrue(done.wait(2.0))


if __name__ == '__main__':
    unittest.main()
