"""
配置测试：参数校验、速度模型与 PeerConfig 三字母编码。
"""

import pytest

from common.datastructures import Behavior, Strategy, Tier
from common.errors import (
    ConfigError,
    InvalidChunkCount,
    InvalidPeerCount,
    InvalidSpeedDuration,
    MalformedPeerConfigLine,
    OverAllocatedBehaviors,
)
from config import Config, PeerConfig, load_peer_configs
from network import SpeedModel


class TestSpeedModel:
    def test_defaults_are_uniform(self):
        speed = SpeedModel()
        assert [speed.duration_of(t) for t in Tier] == [1, 1, 1]

    def test_transfer_bottlenecked_by_slower_side(self):
        speed = SpeedModel(fast=1, medium=2, slow=4)
        assert speed.transfer_duration(Tier.FAST, Tier.SLOW) == 4
        assert speed.transfer_duration(Tier.SLOW, Tier.FAST) == 4
        assert speed.transfer_duration(Tier.MEDIUM, Tier.FAST) == 2

    @pytest.mark.parametrize("kwargs", [{"fast": 0}, {"medium": -1}, {"slow": 0}])
    def test_rejects_non_positive_durations(self, kwargs):
        with pytest.raises(InvalidSpeedDuration):
            SpeedModel(**kwargs)

    def test_from_mapping_fills_missing_tiers(self):
        speed = SpeedModel.from_mapping({Tier.SLOW: 3})
        assert speed == SpeedModel(fast=1, medium=1, slow=3)


class TestPeerConfig:
    def test_parse_code(self):
        pc = PeerConfig.from_string("srf")
        assert pc == PeerConfig(Behavior.SELFISH, Strategy.RAREST_FIRST, Tier.FAST)

    def test_parse_all_letters(self):
        pc = PeerConfig.from_string("fus")
        assert pc.behavior is Behavior.FREERIDER
        assert pc.strategy is Strategy.UNIFORM
        assert pc.tier is Tier.SLOW
        assert pc.to_string() == "fus"

    @pytest.mark.parametrize("code", ["xrf", "sxf", "srx", "sr", "srfm", "SRF", ""])
    def test_rejects_out_of_alphabet(self, code):
        with pytest.raises(MalformedPeerConfigLine):
            PeerConfig.from_string(code)

    def test_rejects_non_enum_values(self):
        with pytest.raises(MalformedPeerConfigLine):
            PeerConfig("selfish", Strategy.UNIFORM, Tier.FAST)

    def test_load_file_skips_blank_and_comment_lines(self, tmp_path):
        path = tmp_path / "peers.txt"
        path.write_text("srf\n\n# slow uniform freerider\nfus\n  amm  \n")
        assert [pc.to_string() for pc in load_peer_configs(str(path))] == ["srf", "fus", "amm"]

    def test_load_file_reports_line_number(self, tmp_path):
        path = tmp_path / "peers.txt"
        path.write_text("srf\nzzz\n")
        with pytest.raises(MalformedPeerConfigLine) as exc_info:
            load_peer_configs(str(path))
        assert exc_info.value.line_number == 2
        assert exc_info.value.line == "zzz"


class TestConfigFromCounts:
    def test_behaviors_assigned_after_altruists(self):
        config = Config.from_counts(4, 6, selfish=1, freerider=2, strategy=Strategy.UNIFORM)
        assert config.behaviors == [
            Behavior.ALTRUISTIC, Behavior.ALTRUISTIC, Behavior.ALTRUISTIC,
            Behavior.SELFISH, Behavior.FREERIDER, Behavior.FREERIDER,
        ]
        assert config.strategies[0] is Strategy.RAREST_FIRST
        assert config.strategies[1:] == [Strategy.UNIFORM] * 5
        assert config.tiers == [Tier.FAST] * 6

    def test_all_downloaders_may_misbehave(self):
        config = Config.from_counts(1, 3, selfish=1, freerider=1)
        assert config.behaviors[0] is Behavior.ALTRUISTIC

    @pytest.mark.parametrize("chunks", [0, -3])
    def test_invalid_chunk_count(self, chunks):
        with pytest.raises(InvalidChunkCount):
            Config.from_counts(chunks, 4)

    @pytest.mark.parametrize("peers", [0, 1])
    def test_invalid_peer_count(self, peers):
        with pytest.raises(InvalidPeerCount):
            Config.from_counts(3, peers)

    def test_over_allocated_behaviors(self):
        with pytest.raises(OverAllocatedBehaviors):
            Config.from_counts(3, 4, selfish=2, freerider=2)

    def test_negative_counts_rejected(self):
        with pytest.raises(OverAllocatedBehaviors):
            Config.from_counts(3, 4, selfish=-1)

    def test_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            Config.from_counts(0, 4)

    @pytest.mark.parametrize("seed", [-5, "7", 1.5])
    def test_random_seed_must_be_non_negative_integer(self, seed):
        with pytest.raises(ConfigError):
            Config.from_counts(3, 4, random_seed=seed)

    def test_zero_seed_is_valid(self):
        assert Config.from_counts(3, 4, random_seed=0).random_seed == 0


class TestConfigFromPeerConfigs:
    def test_entries_applied_in_order_and_remainder_defaulted(self):
        entries = [PeerConfig.from_string("smm"), PeerConfig.from_string("fus")]
        config = Config.from_peer_configs(2, 5, entries)
        assert config.peer_config(0) == PeerConfig()
        assert config.peer_config(1) == entries[0]
        assert config.peer_config(2) == entries[1]
        assert config.peer_config(3) == PeerConfig()
        assert config.peer_config(4) == PeerConfig()

    def test_too_many_entries(self):
        with pytest.raises(OverAllocatedBehaviors):
            Config.from_peer_configs(2, 2, [PeerConfig(), PeerConfig()])

    def test_create_rejects_mixed_modes(self):
        with pytest.raises(ConfigError):
            Config.create(2, 3, selfish=1, peer_configs=[PeerConfig()])

    def test_create_dispatches_to_peer_configs(self):
        config = Config.create(2, 3, peer_configs=[PeerConfig.from_string("sus")])
        assert config.behaviors[1] is Behavior.SELFISH
        assert config.tiers[1] is Tier.SLOW

    def test_seed_must_be_altruistic(self):
        with pytest.raises(ConfigError):
            Config(chunk_count=1, peer_count=2,
                   behaviors=[Behavior.FREERIDER, Behavior.ALTRUISTIC],
                   strategies=[Strategy.RAREST_FIRST] * 2,
                   tiers=[Tier.FAST] * 2)

    def test_per_peer_lists_must_match_peer_count(self):
        with pytest.raises(ConfigError):
            Config(chunk_count=1, peer_count=3,
                   behaviors=[Behavior.ALTRUISTIC] * 2,
                   strategies=[Strategy.RAREST_FIRST] * 3,
                   tiers=[Tier.FAST] * 3)
