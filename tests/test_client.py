"""Tests for the WebSocket bridge client (no network)"""

import asyncio
import json
import time

import pytest

from motion_control.client import RobotClient, build_parser


class FakeWebSocket:
    """Collects sent messages and replays queued ones"""

    def __init__(self, incoming=None):
        self.sent = []
        self.incoming = list(incoming or [])

    async def send(self, message):
        self.sent.append(message)

    async def recv(self):
        if self.incoming:
            return self.incoming.pop(0)
        await asyncio.sleep(3600)


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.delenv("RUN_DIR", raising=False)
    with RobotClient("ws://localhost:8765", output_dir=str(tmp_path)) as robot_client:
        yield robot_client


def send(client, **message):
    client.parse_and_route_message(json.dumps(message))


def test_invalid_uri(tmp_path):
    """Only ws:// and wss:// URIs are accepted"""
    with pytest.raises(ValueError):
        RobotClient("http://localhost:8765", output_dir=str(tmp_path))


def test_operator_message(client):
    """Operator axes and drive options are cached"""
    send(client, message_type="operator", x=0.5, y=-0.25, rotation=0.1, arm=0.3,
         field_relative=False, speed_tier="slow")

    assert client.inputs.x == 0.5
    assert client.inputs.y == -0.25
    assert client.inputs.arm_manual == 0.3
    assert client.inputs.field_relative is False
    assert client.inputs.speed_tier == "slow"


def test_mechanism_messages(client):
    """Arm, gripper and balance requests are cached"""
    send(client, message_type="arm", segment={"level": 2, "piece": "cube"}, slow=True)
    send(client, message_type="gripper", position="close_cone")
    send(client, message_type="balance", enabled=True)

    assert client.inputs.arm_segment == (2, "cube")
    assert client.inputs.arm_slow
    assert client.inputs.gripper == "close_cone"
    assert client.inputs.balance


def test_auto_and_vision_messages(client):
    """Autonomous samples and vision poses are parsed"""
    send(client, message_type="auto", vx=1.0, vy=0.0, omega=0.2, pose={"x": 1.0, "y": 2.0, "heading": 0.5})
    send(client, message_type="vision", pose={"x": 0.1, "y": 0.0}, timestamp=0.0, confidence=0.8)

    assert client.inputs.auto_sample.speeds.omega == 0.2
    assert client.inputs.auto_sample.pose.y == 2.0
    assert client.inputs.vision.confidence == 0.8
    assert client.inputs.vision.pose.heading == 0.0


def test_malformed_messages_ignored(client):
    """Bad JSON and bad fields are logged, not raised"""
    client.parse_and_route_message("{not json")
    client.parse_and_route_message(b'{"message_type": "vision", "pose": {"x": 1.0}}')
    send(client, message_type="mystery")

    assert client.inputs.vision is None
    assert not client.should_stop


def test_end_message_stops(client):
    """The end message stops the control loop"""
    send(client, message_type="end")

    assert client.should_stop


def test_one_shot_requests_consumed(client):
    """Operator axes persist across cycles; one-shot requests do not"""
    send(client, message_type="operator", x=0.5)
    send(client, message_type="gripper", position="open")

    first = client.step(0.0)
    assert first.gripper_setpoint == pytest.approx(-40.0)
    assert client.inputs.gripper is None
    assert client.inputs.x == 0.5

    client.step(0.02)
    assert client.core.gripper.setpoint == pytest.approx(-40.0)


def test_step_advances_simulation(client):
    """Stepping the client drives the simulated robot"""
    send(client, message_type="operator", x=0.5, field_relative=False)
    report = None
    for i in range(30):
        report = client.step(i * 0.02)

    assert report.pose.x > 0.3
    assert client.cycle_count == 30


def test_send_state(client):
    """The state message carries the cycle report"""
    websocket = FakeWebSocket()
    report = client.step(0.0)
    asyncio.run(client.send_state(websocket, report))

    message = json.loads(websocket.sent[0])
    assert message["message_type"] == "state"
    assert message["pose"] == {"x": 0.0, "y": 0.0, "heading": 0.0}


def test_receive_until_routes_messages(client):
    """Messages arriving before the deadline are routed"""
    websocket = FakeWebSocket([json.dumps({"message_type": "operator", "x": 0.7})])

    asyncio.run(client.receive_until(websocket, time.monotonic() + 0.2))
    assert client.inputs.x == 0.7


def test_parser_defaults():
    """The CLI defaults to the local bridge"""
    args = build_parser().parse_args([])

    assert args.uri == "ws://localhost:8765"
    assert not args.verbose
