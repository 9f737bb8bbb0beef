from __future__ import annotations

import unittest
from dataclasses import replace
from datetime import timedelta

from chaingenesis import identityset
from chaingenesis.config import Account, BootstrapCandidate, Delegate, default_config, testnet_default
from chaingenesis.errors import GenesisLoadError, GenesisValidationError
from chaingenesis.forks import MAX_HEIGHT
from chaingenesis.validate import collect_problems, validate


ADDR_A = str(identityset.address(0))


class ValidateTest(unittest.TestCase):
    def test_defaults_are_valid(self) -> None:
        self.assertEqual(collect_problems(default_config()), [])
        self.assertEqual(collect_problems(testnet_default()), [])
        genesis = testnet_default()
        self.assertIs(validate(genesis), genesis)

    def test_problems_are_aggregated(self) -> None:
        genesis = default_config()
        broken = replace(
            genesis,
            account=Account(init_balance_map={"io1bogus": "1", ADDR_A: "-5"}),
            poll=replace(genesis.poll, delegates=(Delegate(operator_addr_str=ADDR_A, reward_addr_str="x", votes_str="1.5"),)),
        )
        with self.assertRaises(GenesisValidationError) as ctx:
            validate(broken)
        self.assertIsInstance(ctx.exception, GenesisLoadError)
        problems = ctx.exception.problems
        self.assertEqual(len(problems), 4)
        self.assertTrue(any(p.startswith("poll.delegates[0].rewardAddr") for p in problems))
        self.assertTrue(any(p.startswith("poll.delegates[0].votes") for p in problems))
        self.assertIn("4 problems", str(ctx.exception))

    def test_height_range(self) -> None:
        genesis = default_config()
        too_high = replace(genesis, blockchain=replace(genesis.blockchain, palau_block_height=MAX_HEIGHT + 1))
        problems = collect_problems(too_high)
        self.assertEqual(len(problems), 1)
        self.assertTrue(problems[0].startswith("blockchain.palauHeight"))

    def test_cross_field_rules(self) -> None:
        genesis = default_config()
        broken = replace(
            genesis,
            blockchain=replace(genesis.blockchain, block_interval=timedelta(0)),
            poll=replace(genesis.poll, probation_intensity_rate=101, probation_epoch_period=21),
        )
        problems = collect_problems(broken)
        self.assertEqual(len(problems), 3)

    def test_bootstrap_candidates_checked(self) -> None:
        genesis = default_config()
        candidate = BootstrapCandidate(
            owner_address=ADDR_A,
            operator_address=ADDR_A,
            reward_address="",
            name="alpha",
            self_staking_tokens="1200000000000000000000000",
        )
        staking = replace(genesis.staking, bootstrap_candidates=(candidate,))
        problems = collect_problems(replace(genesis, staking=staking))
        self.assertEqual(problems, ["staking.bootstrapCandidates[0].rewardAddress: malformed address ''"])

    def test_float_constants_must_be_finite(self) -> None:
        genesis = default_config()
        consts = replace(genesis.staking.vote_weight_cal_consts, duration_lg=float("nan"))
        staking = replace(genesis.staking, vote_weight_cal_consts=consts)
        problems = collect_problems(replace(genesis, staking=staking))
        self.assertEqual(len(problems), 1)
        self.assertTrue(problems[0].startswith("staking.voteWeightCalConsts.durationLg"))


if __name__ == "__main__":
    unittest.main()
