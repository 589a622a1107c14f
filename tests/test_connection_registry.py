#!/usr/bin/env python3
"""
Unit tests for server/chat/connection.py and server/chat/registry.py

Tests the connection lifecycle and the name bindings:
- Fire-and-forget sends and per-connection ordering
- Send failures and slow peers
- Name uniqueness under concurrent binds
- Idempotent unbind and point-in-time snapshots
"""

import asyncio
import unittest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from server.chat.connection import Connection, ConnectionState, IdentityAlreadyBound
from server.chat.registry import Registry
from tests.fakes import FakeTransport, settle


class TestConnection(unittest.IsolatedAsyncioTestCase):
    """Test cases for a single connection."""

    async def asyncSetUp(self):
        self.transport = FakeTransport()
        self.connection = Connection(self.transport)
        self.connection.start()

    async def asyncTearDown(self):
        self.connection.mark_closed()

    async def test_send_preserves_order(self):
        """Frames reach the transport in the order they were sent."""
        for i in range(5):
            self.assertTrue(self.connection.send(f"frame-{i}"))
        await settle(self.connection)
        self.assertEqual(self.transport.sent, [f"frame-{i}" for i in range(5)])

    async def test_send_after_close_is_dropped(self):
        """A connection that is not OPEN refuses frames without raising."""
        self.connection.mark_closed()
        self.assertEqual(self.connection.state, ConnectionState.CLOSED)
        self.assertFalse(self.connection.send("late"))
        self.assertEqual(self.transport.sent, [])

    async def test_full_queue_drops_frame(self):
        """A slow peer loses frames instead of blocking the sender."""
        connection = Connection(FakeTransport(), queue_size=2)
        # Writer not started, so nothing leaves the queue
        self.assertTrue(connection.send("a"))
        self.assertTrue(connection.send("b"))
        self.assertFalse(connection.send("c"))

    async def test_transport_failure_marks_closing(self):
        """A failed send stops further delivery."""
        self.transport.fail_sends = True
        self.assertTrue(self.connection.send("doomed"))
        await settle(self.connection)
        self.assertEqual(self.connection.state, ConnectionState.CLOSING)
        self.assertFalse(self.connection.send("after"))

    async def test_close_closes_transport(self):
        await self.connection.close()
        self.assertTrue(self.transport.closed)
        self.assertEqual(self.connection.state, ConnectionState.CLOSING)
        self.connection.mark_closed()
        self.connection.mark_closed()
        self.assertEqual(self.connection.state, ConnectionState.CLOSED)

    async def test_identity_set_once(self):
        self.connection.bind_identity("alice")
        with self.assertRaises(IdentityAlreadyBound):
            self.connection.bind_identity("bob")
        self.assertEqual(self.connection.identity, "alice")

    async def test_unique_ids(self):
        other = Connection(FakeTransport())
        self.assertNotEqual(self.connection.cid, other.cid)


class TestRegistry(unittest.IsolatedAsyncioTestCase):
    """Test cases for the name registry."""

    async def asyncSetUp(self):
        self.registry = Registry()
        self.alice = Connection(FakeTransport())
        self.bob = Connection(FakeTransport())

    async def test_bind_and_lookup(self):
        self.assertTrue(await self.registry.try_bind("alice", self.alice))
        self.assertIs(await self.registry.lookup("alice"), self.alice)
        self.assertEqual(self.alice.identity, "alice")
        self.assertIn("alice", self.registry)
        self.assertIsNone(await self.registry.lookup("carol"))

    async def test_name_collision(self):
        """A taken name cannot be bound again and nothing changes."""
        self.assertTrue(await self.registry.try_bind("alice", self.alice))
        self.assertFalse(await self.registry.try_bind("alice", self.bob))
        self.assertIsNone(self.bob.identity)
        self.assertIs(await self.registry.lookup("alice"), self.alice)
        self.assertEqual(len(self.registry), 1)

    async def test_concurrent_binds_single_winner(self):
        """Of many simultaneous attempts for one name exactly one succeeds."""
        contenders = [Connection(FakeTransport()) for _ in range(10)]
        results = await asyncio.gather(*(self.registry.try_bind("alice", c) for c in contenders))
        self.assertEqual(results.count(True), 1)
        winner = contenders[results.index(True)]
        self.assertIs(await self.registry.lookup("alice"), winner)
        self.assertEqual([c for c in contenders if c.is_bound], [winner])

    async def test_bound_connection_cannot_take_second_name(self):
        self.assertTrue(await self.registry.try_bind("alice", self.alice))
        self.assertFalse(await self.registry.try_bind("alice2", self.alice))
        self.assertEqual(await self.registry.snapshot(), ["alice"])

    async def test_closed_connection_cannot_bind(self):
        self.alice.mark_closed()
        self.assertFalse(await self.registry.try_bind("alice", self.alice))
        self.assertEqual(len(self.registry), 0)

    async def test_unbind_is_idempotent(self):
        await self.registry.try_bind("alice", self.alice)
        self.assertEqual(await self.registry.unbind(self.alice), "alice")
        self.assertIsNone(await self.registry.unbind(self.alice))
        self.assertNotIn("alice", self.registry)

    async def test_unbind_never_logged_in(self):
        self.assertIsNone(await self.registry.unbind(self.bob))

    async def test_unbind_frees_name(self):
        await self.registry.try_bind("alice", self.alice)
        await self.registry.unbind(self.alice)
        self.assertTrue(await self.registry.try_bind("alice", self.bob))
        self.assertIs(await self.registry.lookup("alice"), self.bob)

    async def test_snapshot_and_members(self):
        await self.registry.try_bind("alice", self.alice)
        await self.registry.try_bind("bob", self.bob)
        self.assertEqual(set(await self.registry.snapshot()), {"alice", "bob"})
        members = dict(await self.registry.members())
        self.assertEqual(members, {"alice": self.alice, "bob": self.bob})

        # Snapshots are copies
        names = await self.registry.snapshot()
        await self.registry.unbind(self.bob)
        self.assertEqual(set(names), {"alice", "bob"})


if __name__ == '__main__':
    unittest.main()
