"""
节点状态、上传源资格与单轮传输匹配的测试。
"""

from common.datastructures import Behavior, Strategy, Tier
from config import Config, PeerConfig
from network import SpeedModel
from randomness import RandomSource
from coordinator import TransferMatcher
from observers import CollectingRunObserver
from simulation import Distribution
from storage.state import SwarmState


def _swarm(chunks, codes):
    config = Config.from_peer_configs(chunks, len(codes) + 1, [PeerConfig.from_string(c) for c in codes])
    return SwarmState.from_config(config)


class TestPeerState:
    def test_initial_possession(self):
        swarm = _swarm(3, ["arf", "arf"])
        assert swarm.peers[0].possession == [True, True, True]
        assert swarm.peers[0].completion_round == 0
        assert swarm.peers[1].possession == [False, False, False]
        assert swarm.possession_counts == [1, 1, 1]
        assert swarm.completed_peers == 1
        assert swarm.completed_chunks == 0

    def test_record_receipt_updates_counts(self):
        swarm = _swarm(2, ["arf"])
        assert swarm.record_receipt(1, 0, 1) == (False, True)
        assert swarm.record_receipt(1, 1, 2) == (True, True)
        assert swarm.peers[1].completion_round == 2
        assert swarm.chunk_completion_rounds == [1, 2]
        assert swarm.is_finished()

    def test_reset_restores_initial_state(self):
        swarm = _swarm(2, ["arf"])
        swarm.record_receipt(1, 0, 1)
        swarm.reset()
        assert swarm.peers[1].possession == [False, False]
        assert swarm.possession_counts == [1, 1]
        assert swarm.completed_chunks == 0


class TestEligibility:
    def test_seed_always_source(self):
        swarm = _swarm(3, ["frf"])
        assert all(swarm.eligible_sources(c) == [0] for c in range(3))

    def test_selfish_stops_after_completion(self):
        swarm = _swarm(2, ["srf"])
        swarm.record_receipt(1, 0, 1)
        assert swarm.eligible_sources(0) == [0, 1]
        swarm.record_receipt(1, 1, 2)
        assert swarm.eligible_sources(0) == [0]
        assert swarm.eligible_sources(1) == [0]

    def test_freerider_never_source(self):
        swarm = _swarm(2, ["frf"])
        swarm.record_receipt(1, 0, 1)
        assert swarm.eligible_sources(0) == [0]

    def test_altruist_keeps_uploading_after_completion(self):
        swarm = _swarm(1, ["arf"])
        swarm.record_receipt(1, 0, 1)
        assert swarm.eligible_sources(0) == [0, 1]


class TestTransferMatcher:
    def test_duration_uses_slower_tier(self):
        config = Config.from_peer_configs(1, 2, [PeerConfig(Behavior.ALTRUISTIC, Strategy.RAREST_FIRST, Tier.SLOW)],
                                          speed=SpeedModel(fast=1, medium=2, slow=4), random_seed=5)
        distribution = Distribution(config)
        started = distribution.matcher.match_idle_peers()
        assert len(started) == 1
        transfer = started[0]
        assert (transfer.downloader_id, transfer.uploader_id, transfer.chunk) == (1, 0, 0)
        assert transfer.rounds_remaining == 4

        matcher = distribution.matcher
        assert [matcher.advance_transfers(r) for r in (1, 2, 3)] == [0, 0, 0]
        assert matcher.advance_transfers(4) == 1
        assert distribution.peers[1].possession == [True]
        assert matcher.transfers == {}

    def test_busy_downloader_is_not_rematched(self):
        config = Config.from_counts(2, 2, speed=SpeedModel(fast=3), random_seed=1)
        matcher = Distribution(config).matcher
        assert len(matcher.match_idle_peers()) == 1
        assert matcher.eligible_downloaders() == []
        assert matcher.match_idle_peers() == []

    def test_uploader_capacity_is_unconstrained(self):
        config = Config.from_counts(1, 5, random_seed=2)
        matcher = Distribution(config).matcher
        started = matcher.match_idle_peers()
        assert [t.downloader_id for t in started] == [1, 2, 3, 4]
        assert {t.uploader_id for t in started} == {0}

    def test_candidates_limited_to_available_chunks(self):
        swarm = _swarm(3, ["arf", "frf"])
        swarm.record_receipt(2, 1, 1)
        matcher = TransferMatcher(swarm, SpeedModel(), RandomSource(0))
        assert matcher.candidate_chunks(1) == [0, 1, 2]
        # chunk 1 is held by the freerider too, but only the seed may serve it
        for _ in range(10):
            matcher.reset()
            transfer = next(t for t in matcher.match_idle_peers() if t.downloader_id == 1)
            assert transfer.uploader_id == 0

    def test_source_choice_follows_choose_one(self):
        swarm = _swarm(1, ["arf", "arf", "arf"])
        swarm.record_receipt(1, 0, 1)
        swarm.record_receipt(2, 0, 1)
        matcher = TransferMatcher(swarm, SpeedModel(), RandomSource(17))
        (transfer,) = matcher.match_idle_peers()
        assert transfer.downloader_id == 3

        replay = RandomSource(17)
        replay.choose_one([0])  # chunk selection for peer 3
        assert transfer.uploader_id == replay.choose_one([0, 1, 2])

    def test_observer_sees_transfer_events(self):
        config = Config.from_counts(1, 2, random_seed=3)
        distribution = Distribution(config)
        observer = CollectingRunObserver()
        matcher = distribution.matcher.bind_observer(observer)
        matcher.run_round(1)
        assert observer.transfers == [(None, 0, 0, 1, 1)]
        assert observer.receipts == [(None, 0, 0, 1)]
        assert observer.completed_peers == [(None, 1)]
        assert observer.completed_chunks == [(None, 0)]
        assert distribution.peers[0].uploads == 1
