import threading
from typing import Dict, Iterable, Optional, Tuple

from flask import request
from flask_socketio import join_room

from redlight.errors import HOST_LOST_MESSAGE, AlreadyAffiliated, NotFound, RoomError
from redlight.models import Room
from redlight.services.rounds import ArmScheduler, Notification, RoomRegistry, RoundStateMachine

ROLE_HOST = 'host'
ROLE_PLAYER = 'player'


class SocketGateway:
    """Connects Socket.IO connections to rooms.

    Keeps the sid -> (room code, role) index, turns inbound events into
    state machine calls and delivers the resulting notifications either to
    the calling connection or to the room's Socket.IO channel. Each room's
    lock is held across mutation and emission so a room's events go out in
    the order its intents were handled.
    """

    def __init__(self, socketio, registry: RoomRegistry, rounds: RoundStateMachine,
                 scheduler: ArmScheduler, logger, namespace: str = '/'):
        self.socketio = socketio
        self.registry = registry
        self.rounds = rounds
        self.scheduler = scheduler
        self.logger = logger
        self.namespace = namespace
        self._connections: Dict[str, Tuple[str, str]] = {}
        self._index_lock = threading.Lock()

    # ---- Socket.IO handlers ----

    def handle_connect(self, auth=None):
        self.logger.info(f"[connect] sid={_get_sid()}")

    def handle_disconnect(self, reason=None):
        sid = _get_sid()
        self.logger.info(f"[disconnect] sid={sid} reason={reason}")
        self.drop_connection(sid)

    def handle_create_room(self, data=None):
        sid = _get_sid()
        if self.affiliation(sid):
            self._reply_error(sid, AlreadyAffiliated())
            return
        room = self.registry.create_room(sid)
        with room.lock:
            self._affiliate(sid, room.code, ROLE_HOST)
            join_room(room.channel, sid=sid, namespace=self.namespace)
            self._deliver(room, sid, [Notification('roomCreated', room.code, broadcast=False)])

    def handle_join_room(self, data=None):
        sid = _get_sid()
        data = data if isinstance(data, dict) else {}
        code = data.get('roomCode')
        room = self.registry.find_room(code)
        try:
            if room is None:
                raise NotFound()
            with room.lock:
                if self.affiliation(sid) and not room.is_host(sid):
                    raise AlreadyAffiliated()
                notes = self.rounds.add_player(room, sid, data.get('username'))
                self._affiliate(sid, room.code, ROLE_PLAYER)
                join_room(room.channel, sid=sid, namespace=self.namespace)
                self._deliver(room, sid, notes)
        except RoomError as exc:
            self._reject(sid, code, 'joinRoom', exc)

    def handle_start_game(self, data=None):
        sid = _get_sid()
        self._dispatch(sid, data, 'startGame', self.rounds.start_round, sid, then=self._schedule_arm)

    def handle_player_clicked(self, data=None):
        sid = _get_sid()
        # timestamp before waiting on the room lock
        at_ms = self.rounds.now_ms()
        self._dispatch(sid, data, 'playerClicked', self.rounds.player_clicked, sid, at_ms)

    def handle_next_game(self, data=None):
        sid = _get_sid()
        self._dispatch(sid, data, 'nextGame', self.rounds.next_round, sid,
                       then=lambda room: self.scheduler.cancel(room.code))

    # ---- Lifecycle ----

    def _schedule_arm(self, room: Room) -> None:
        delay = self.rounds.draw_arm_delay()
        self.scheduler.schedule(room.code, delay, self.arm_room, room.code, room.round_no)

    def arm_room(self, code: str, round_no: int) -> None:
        """Timer callback; the room may be gone by the time it fires."""
        room = self.registry.find_room(code)
        if room is None:
            self.logger.info(f"[arm-skip] room={code} no longer exists")
            return
        with room.lock:
            self._deliver(room, None, self.rounds.arm(room, round_no))

    def drop_connection(self, sid: str) -> None:
        ctx = self._unaffiliate(sid)
        if not ctx:
            return
        code, role = ctx
        room = self.registry.find_room(code)
        if room is None:
            return
        with room.lock:
            if role == ROLE_HOST and room.is_host(sid):
                self.destroy_room(room, HOST_LOST_MESSAGE)
            else:
                self._deliver(room, sid, self.rounds.remove_player(room, sid))

    def destroy_room(self, room: Room, reason: str) -> None:
        with room.lock:
            members = list(room.players)
            self.scheduler.cancel(room.code)
            self.registry.destroy_room(room.code)
            self.logger.info(f"[host-lost] room={room.code} players={len(members)} phase={room.phase}")
            self._emit('errorMessage', reason, to=room.channel)
            self.socketio.close_room(room.channel, namespace=self.namespace)
            for member in members + [room.host_id]:
                self._unaffiliate(member)

    # ---- Connection index ----

    def affiliation(self, sid: str) -> Optional[Tuple[str, str]]:
        with self._index_lock:
            return self._connections.get(sid)

    def _affiliate(self, sid: str, code: str, role: str) -> None:
        with self._index_lock:
            self._connections[sid] = (code, role)

    def _unaffiliate(self, sid: str) -> Optional[Tuple[str, str]]:
        with self._index_lock:
            return self._connections.pop(sid, None)

    # ---- Delivery ----

    def _dispatch(self, sid, data, intent, op, *args, then=None) -> Optional[Room]:
        """Run ``op(room, *args)`` under the room lock and deliver what it returns.

        ``then(room)`` runs afterwards, still under the lock, only if the
        intent was accepted. Returns the room when it was.
        """
        code = _room_code_from(data)
        room = self.registry.find_room(code)
        if room is None:
            self.logger.debug(f"[ignored] intent={intent} sid={sid} room={code} not found")
            return None
        try:
            with room.lock:
                self._deliver(room, sid, op(room, *args))
                if then is not None:
                    then(room)
        except RoomError as exc:
            # unknown or closed rooms are silent for in-game intents
            if isinstance(exc, NotFound):
                self.logger.debug(f"[ignored] intent={intent} sid={sid} room={code} closed")
            else:
                self._reject(sid, code, intent, exc)
            return None
        return room

    def _deliver(self, room: Room, sid: Optional[str], notes: Iterable[Notification]) -> None:
        for note in notes:
            target = room.channel if note.broadcast else sid
            self._emit(note.event, note.data, to=target)

    def _reject(self, sid: str, code, intent: str, exc: RoomError) -> None:
        if exc.notify_caller:
            self._reply_error(sid, exc)
        else:
            self.logger.debug(f"[ignored] intent={intent} sid={sid} room={code} reason={exc.text}")

    def _reply_error(self, sid: str, exc: RoomError) -> None:
        self._emit('errorMessage', exc.text, to=sid)

    def _emit(self, event: str, data=None, to=None) -> None:
        args = () if data is None else (data,)
        self.socketio.emit(event, *args, to=to, namespace=self.namespace)


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _room_code_from(data):
    if isinstance(data, dict):
        return data.get('roomCode')
    return data


def register_socketio_handlers(gateway: SocketGateway) -> None:
    """Register the gateway's handlers on its namespace."""
    socketio = gateway.socketio
    namespace = gateway.namespace
    socketio.on_event('connect', gateway.handle_connect, namespace=namespace)
    socketio.on_event('disconnect', gateway.handle_disconnect, namespace=namespace)
    socketio.on_event('createRoom', gateway.handle_create_room, namespace=namespace)
    socketio.on_event('joinRoom', gateway.handle_join_room, namespace=namespace)
    socketio.on_event('startGame', gateway.handle_start_game, namespace=namespace)
    socketio.on_event('playerClicked', gateway.handle_player_clicked, namespace=namespace)
    socketio.on_event('nextGame', gateway.handle_next_game, namespace=namespace)
