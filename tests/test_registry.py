from rendezvous.registry import PeerRegistry


class TestRegister:
    def test_register_then_lookup(self, registry, clock):
        registry.register("alice", ("203.0.113.9", 55000), ("10.0.0.5", 4000))

        record = registry.lookup("alice")
        assert record.peer_id == "alice"
        assert record.public_address == ("203.0.113.9", 55000)
        assert record.private_address == ("10.0.0.5", 4000)
        assert record.last_seen == clock.now

    def test_private_address_is_optional(self, registry):
        registry.register("alice", ("203.0.113.9", 55000))
        assert registry.lookup("alice").private_address is None

    def test_last_write_wins(self, registry, clock):
        registry.register("alice", ("203.0.113.9", 55000), ("10.0.0.5", 4000))
        clock.advance(5)
        registry.register("alice", ("198.51.100.1", 40000), None)

        record = registry.lookup("alice")
        assert record.public_address == ("198.51.100.1", 40000)
        assert record.private_address is None
        assert len(registry) == 1

    def test_last_seen_advances_with_clock(self, registry, clock):
        first = registry.register("alice", ("203.0.113.9", 55000)).last_seen
        clock.advance(1)
        second = registry.register("alice", ("203.0.113.9", 55000)).last_seen
        assert second == first + 1

    def test_last_seen_strictly_advances_when_clock_stalls(self, registry):
        first = registry.register("alice", ("203.0.113.9", 55000)).last_seen
        second = registry.register("alice", ("203.0.113.9", 55001)).last_seen
        assert second > first

    def test_last_seen_never_goes_backwards(self, registry, clock):
        first = registry.register("alice", ("203.0.113.9", 55000)).last_seen
        clock.advance(-10)
        second = registry.register("alice", ("203.0.113.9", 55000)).last_seen
        assert second > first

    def test_list_addresses_are_stored_as_tuples(self, registry):
        registry.register("alice", ["203.0.113.9", 55000], ["10.0.0.5", 4000])
        record = registry.lookup("alice")
        assert record.public_address == ("203.0.113.9", 55000)
        assert record.private_address == ("10.0.0.5", 4000)


class TestLookup:
    def test_unknown_peer(self, registry):
        assert registry.lookup("nobody") is None

    def test_lookup_has_no_side_effects(self, registry):
        registry.lookup("nobody")
        assert len(registry) == 0
        assert "nobody" not in registry

    def test_entries_never_expire_by_default(self, registry, clock):
        registry.register("alice", ("203.0.113.9", 55000))
        clock.advance(10 * 365 * 24 * 3600)
        assert registry.lookup("alice") is not None


class TestTTL:
    def test_stale_peer_is_absent(self, clock):
        registry = PeerRegistry(clock=clock, ttl=30)
        registry.register("alice", ("203.0.113.9", 55000))

        clock.advance(29)
        assert registry.lookup("alice") is not None
        clock.advance(2)
        assert registry.lookup("alice") is None

    def test_stale_peer_is_kept_and_can_reregister(self, clock):
        registry = PeerRegistry(clock=clock, ttl=30)
        registry.register("alice", ("203.0.113.9", 55000))
        clock.advance(60)

        assert len(registry) == 1
        registry.register("alice", ("203.0.113.9", 55000))
        assert registry.lookup("alice") is not None
        assert "alice" in registry

    def test_membership_agrees_with_lookup(self, clock):
        registry = PeerRegistry(clock=clock, ttl=30)
        registry.register("alice", ("203.0.113.9", 55000))
        assert "alice" in registry

        clock.advance(31)
        assert registry.lookup("alice") is None
        assert "alice" not in registry

    def test_stale_lookup_reads_clock_once(self):
        ticks = iter(range(0, 1000, 100))
        calls = []

        def clock():
            calls.append(None)
            return 1_700_000_000.0 + next(ticks)

        registry = PeerRegistry(clock=clock, ttl=30)
        registry.register("alice", ("203.0.113.9", 55000))
        calls.clear()

        assert registry.lookup("alice") is None
        assert len(calls) == 1
