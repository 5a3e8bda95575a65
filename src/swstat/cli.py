""" Command line entry point::

        swstat <host>             # poll statistics until Enter or Ctrl-C
        swstat <host> <command>   # run one remote command and exit
"""

import argparse
import logging
import sys
import threading

from . import config
from . import transport
from .client import Client


logger = logging.getLogger(__name__)


def parse(arguments=None):

    parser = argparse.ArgumentParser(
        prog='swstat',
        description='Show live statistics from a SwUDP game server, or run a single remote command on it.'
    )
    parser.add_argument('host', help='server hostname or address')
    parser.add_argument('command', nargs='?', default=None,
                        help='remote command to execute; the client exits after the response')
    parser.add_argument('-p', '--port', type=int, default=None,
                        help='server UDP port (default: %d)' % (config.defaults['port']))
    parser.add_argument('-i', '--interval', type=float, default=None,
                        help='seconds between requests (default: %g)' % (config.defaults['interval']))
    parser.add_argument('-t', '--timeout', type=float, default=None,
                        help='seconds to wait for a command response (default: %g)' % (config.defaults['timeout']))
    parser.add_argument('-c', '--config', default=None,
                        help='configuration file (default: client.json in $SWSTAT_HOME or ~/.swstat)')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='log protocol activity')

    return parser.parse_args(arguments)



def _wait_for_input(client, stream):
    """ Block on one line of input, then end the session. End of input
        counts as a line.
    """

    try:
        stream.readline()
    except (OSError, ValueError):
        pass

    client.done.set()



def main(arguments=None, stdin=None):

    args = parse(arguments)

    if args.verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    logging.basicConfig(level=level, format='%(asctime)s %(name)s %(levelname)s: %(message)s')

    try:
        settings = config.load(args.config)
        settings.update(dict(port=args.port, interval=args.interval, timeout=args.timeout))
    except (OSError, ValueError) as e:
        print('swstat: ' + str(e), file=sys.stderr)
        return 2

    client = Client(args.host, args.command, port=settings.port,
                    interval=settings.interval, maximum=settings.maximum)

    try:
        client.connect()
        print('Waiting for server...', flush=True)
        client.run()

        if client.one_shot:
            finished = client.wait(settings.interval + settings.timeout)
            if finished == False:
                print('No response from %s' % (args.host), file=sys.stderr)
                return 1
        else:
            if stdin is None:
                stdin = sys.stdin

            reader = threading.Thread(target=_wait_for_input, args=(client, stdin))
            reader.daemon = True
            reader.start()

            client.wait()

    except transport.TransportError as e:
        print('swstat: ' + str(e), file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        pass
    finally:
        client.stop()

    return 0


if __name__ == '__main__':
    sys.exit(main())


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
