"""Failures a room intent can run into.

The round state machine raises these; the socket gateway decides what the
caller gets to see. Only errors with ``notify_caller`` set are reported back
(as an ``errorMessage`` to the originating connection), everything else is
dropped after a debug log line.
"""


class RoomError(Exception):
    message = 'Room error.'
    notify_caller = False

    def __init__(self, message=None):
        super().__init__(message or self.message)

    @property
    def text(self) -> str:
        return self.args[0]


class NotFound(RoomError):
    message = 'That room does not exist.'
    notify_caller = True


class Unauthorized(RoomError):
    message = 'Only the host can do that.'


class InvalidState(RoomError):
    message = 'Not allowed in the current phase.'


class DuplicateAction(RoomError):
    message = 'Already clicked this round.'


class AlreadyAffiliated(RoomError):
    message = 'You are already in a room.'
    notify_caller = True


class InvalidName(RoomError):
    message = 'A name is required to join.'
    notify_caller = True


# Broadcast to the remaining players when the host's connection drops
HOST_LOST_MESSAGE = 'The host disconnected, the game has been cancelled.'
