from __future__ import annotations

import hashlib
import json
from typing import Any

from .config import Genesis, duration_nanoseconds


# Bump only together with a deliberate network-wide genesis change.
FINGERPRINT_VERSION = 1
DIGEST_SIZE = 32


def canonical_json(data: Any) -> str:
    return json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=True)


def fingerprint_payload(genesis: Genesis) -> dict[str, Any]:
    """Select the consensus subset of the genesis tree.

    Fork heights and fields added after the first release are left out on
    purpose: scheduling a new fork must not change the fingerprint of an
    otherwise unchanged network.
    """
    bc = genesis.blockchain
    poll = genesis.poll
    rw = genesis.rewarding

    addrs = sorted(genesis.account.init_balance_map)
    return {
        "version": FINGERPRINT_VERSION,
        "blockchain": {
            "timestamp": bc.timestamp,
            "block_gas_limit": bc.block_gas_limit,
            "action_gas_limit": bc.action_gas_limit,
            "block_interval_ns": duration_nanoseconds(bc.block_interval),
            "num_sub_epochs": bc.num_sub_epochs,
            "num_delegates": bc.num_delegates,
            "num_candidate_delegates": bc.num_candidate_delegates,
            "time_based_rotation": bc.time_based_rotation,
        },
        "account": {
            "init_balance_addrs": addrs,
            "init_balances": [genesis.account.init_balance_map[addr] for addr in addrs],
        },
        "poll": {
            "enable_gravity_chain_voting": poll.enable_gravity_chain_voting,
            "gravity_chain_start_height": poll.gravity_chain_start_height,
            "register_contract_address": poll.register_contract_address,
            "staking_contract_address": poll.staking_contract_address,
            "vote_threshold": poll.vote_threshold,
            "score_threshold": poll.score_threshold,
            "self_staking_threshold": poll.self_staking_threshold,
            "delegates": [
                {
                    "operator_addr": d.operator_addr_str,
                    "reward_addr": d.reward_addr_str,
                    "votes": d.votes_str,
                }
                for d in poll.delegates
            ],
        },
        "rewarding": {
            "init_balance": rw.init_balance_str,
            "block_reward": rw.block_reward_str,
            "epoch_reward": rw.epoch_reward_str,
            "num_delegates_for_epoch_reward": rw.num_delegates_for_epoch_reward,
            "foundation_bonus": rw.foundation_bonus_str,
            "num_delegates_for_foundation_bonus": rw.num_delegates_for_foundation_bonus,
            "foundation_bonus_last_epoch": rw.foundation_bonus_last_epoch,
            "productivity_threshold": rw.productivity_threshold,
        },
    }


def fingerprint_bytes(genesis: Genesis) -> bytes:
    return canonical_json(fingerprint_payload(genesis)).encode("utf-8")


def genesis_hash(genesis: Genesis) -> bytes:
    return hashlib.blake2b(fingerprint_bytes(genesis), digest_size=DIGEST_SIZE).digest()


def genesis_hash_hex(genesis: Genesis) -> str:
    return genesis_hash(genesis).hex()
