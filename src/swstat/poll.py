""" Background polling: call a method on a fixed cadence from a dedicated
    thread. The statistics client uses this to issue its periodic requests.
"""

import logging
import threading
import time
import traceback

logger = logging.getLogger(__name__)

active = dict()
active_lock = threading.Lock()


def period(method):
    """ Return the currently set polling period for the provided *method*.
        Returns None if no polling is presently active for that method.
    """

    try:
        poller = active[method]
    except KeyError:
        return None

    return poller.interval



def start(method, period, delay=True):
    """ Call the provided *method* every *period* seconds. A dedicated
        background thread is used for each method. If *delay* is True the
        first call happens one period after starting, otherwise immediately.

        If a background poller is already active for the specified method, the
        poller will be updated to use the newly requested period. This means
        that this mechanism cannot be used to trigger two independent polling
        sequences for the same method.
    """

    if period is None or period == 0:
        stop(method)
        return

    with active_lock:
        poller = active.get(method)
        if poller is None or poller.shutdown == True:
            poller = _Poller(method, delay)
            active[method] = poller

    poller.period(period)
    return poller



def stop(method):
    """ Discontinue calling the provided *method*.
    """

    try:
        poller = active[method]
    except KeyError:
        return

    poller.stop()



class _Poller:
    """ Background thread to invoke any polling requests. If the polled
        method raises an exception, the traceback is logged and polling
        stops; the method is expected to handle its own recoverable errors.
    """

    def __init__(self, method, delay=True):

        self.method = method
        self.delay = delay

        self.interval = None
        self.shutdown = False
        self.calls = 0

        self.alarm = threading.Event()
        self.thread = threading.Thread(target=self.run, name='swstat-poll')
        self.thread.daemon = True
        self.thread.start()


    def period(self, period):
        """ Update the polling interval to *period* seconds.
        """

        period = float(period)
        self.interval = period
        self.wake()


    def run(self):

        interval = None
        next = time.time()

        # Initial wait for someone to call self.period().

        while self.interval is None and self.shutdown == False:
            self.alarm.wait(1)

        while self.shutdown == False:
            begin = time.time()

            if self.alarm.is_set() == True:
                self.alarm.clear()

                # The interval only changes when the alarm is set, including
                # when it is set upon startup. That's our cue to load a new
                # interval for this loop, and start an entirely new cadence.

                first = interval is None
                interval = self.interval
                next = begin + interval

                if first and self.delay:
                    self.alarm.wait(interval)
                    if self.shutdown == True or self.alarm.is_set() == True:
                        continue
                    next += interval

            else:
                # Honor the requested cadence regardless of when we woke up:
                # the next wakeup follows the previous one by one interval.

                next += interval

            try:
                self.method()
            except Exception:
                logger.error('polling stopped, exception in %r:\n%s', self.method, traceback.format_exc())
                break

            self.calls += 1
            end = time.time()

            delay = next - end
            if delay > 0:
                self.alarm.wait(delay)


        # Infinite loop exited.
        with active_lock:
            if active.get(self.method) is self:
                del active[self.method]


    def stop(self):
        self.shutdown = True
        self.wake()


    def wake(self):
        self.alarm.set()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
