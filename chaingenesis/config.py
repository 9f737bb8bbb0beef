from __future__ import annotations

import logging
import re
from dataclasses import MISSING, dataclass, field, fields, replace
from datetime import timedelta
from decimal import Decimal, InvalidOperation, localcontext
from typing import Any, Iterable

from .address import Address, AddressError
from .errors import GenesisDefect
from .forks import ForkGates, lookup
from .units import iotx_to_rau_str, parse_decimal


logger = logging.getLogger(__name__)

# Field kinds. The validator and the overlay mapper dispatch on these.
UINT = "uint"
INT = "int"
UINT32 = "uint32"
BOOL = "bool"
FLOAT = "float"
STR = "str"
AMOUNT = "amount"
THRESHOLD = "threshold"
ADDRESS = "address"
OPTIONAL_ADDRESS = "optional_address"
DURATION = "duration"
BALANCES = "balances"
ADDRESS_LIST = "address_list"
SECTION = "section"
SECTION_LIST = "section_list"

_STRING_KINDS = {STR, AMOUNT, THRESHOLD, ADDRESS, OPTIONAL_ADDRESS}
_NUMERIC_TEXT_KINDS = {AMOUNT, THRESHOLD}

_DURATION_UNITS_NS = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}
MAX_DURATION_NS = 2**63 - 1
_DURATION_PART_RE = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def _field(key: str, default: Any = MISSING, *, kind: str, item: Any = None, default_factory: Any = MISSING) -> Any:
    metadata = {"key": key, "kind": kind, "item": item}
    if default_factory is not MISSING:
        return field(default_factory=default_factory, metadata=metadata)
    return field(default=default, metadata=metadata)


def _fork_field(name: str) -> Any:
    fork = lookup(name)
    return _field(fork.key, fork.default_height, kind=UINT)


def _string_duration_ns(raw: str) -> Decimal:
    text = raw.strip()
    if not text:
        raise ValueError("empty duration")
    if text == "0":
        return Decimal(0)
    total_ns = Decimal(0)
    pos = 0
    with localcontext() as ctx:
        ctx.prec = 80
        while pos < len(text):
            match = _DURATION_PART_RE.match(text, pos)
            if match is None:
                raise ValueError(f"invalid duration {raw!r}")
            try:
                total_ns += Decimal(match.group(1)) * _DURATION_UNITS_NS[match.group(2)]
            except InvalidOperation as exc:
                raise ValueError(f"invalid duration {raw!r}") from exc
            pos = match.end()
    return total_ns


def parse_duration(raw: Any) -> timedelta:
    """Accept a timedelta, a Go-style string such as ``1h30m``, or an integer.

    Bare integers are nanoseconds, as with Go's ``time.Duration``, so
    ``10000000000`` is ten seconds. Values must fit a signed 64-bit
    nanosecond count and be a whole number of microseconds; anything finer
    cannot be stored without changing the fingerprinted value.
    """
    if isinstance(raw, timedelta):
        return raw
    if isinstance(raw, bool):
        raise ValueError(f"invalid duration {raw!r}")
    if isinstance(raw, int):
        total_ns = Decimal(raw)
    elif isinstance(raw, str):
        total_ns = _string_duration_ns(raw)
    else:
        raise ValueError(f"invalid duration {raw!r}")

    if abs(total_ns) > MAX_DURATION_NS:
        raise ValueError(f"duration {raw!r} is out of range")
    if total_ns % 1_000 != 0:
        raise ValueError(f"duration {raw!r} has sub-microsecond precision")
    return timedelta(microseconds=int(total_ns) // 1_000)


def duration_nanoseconds(value: timedelta) -> int:
    return ((value.days * 86_400 + value.seconds) * 1_000_000 + value.microseconds) * 1_000


def format_duration(value: timedelta) -> str:
    micros = duration_nanoseconds(value) // 1_000
    if micros == 0:
        return "0s"
    parts = []
    for unit, size in (("h", 3_600_000_000), ("m", 60_000_000), ("s", 1_000_000), ("ms", 1_000), ("us", 1)):
        count, micros = divmod(micros, size)
        if count:
            parts.append(f"{count}{unit}")
    return "".join(parts)


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def _fatal(what: str, value: Any, exc: Exception) -> GenesisDefect:
    logger.critical("Cannot interpret genesis %s %r: %s", what, value, exc)
    return GenesisDefect(f"Cannot interpret genesis {what} {value!r}: {exc}")


def _amount(value: str, what: str) -> int:
    try:
        return parse_decimal(value)
    except ValueError as exc:
        raise _fatal(what, value, exc) from exc


def _address(value: str, what: str) -> Address:
    try:
        return Address.from_string(value)
    except AddressError as exc:
        raise _fatal(what, value, exc) from exc


def _coerce(f: Any, raw: Any, path: str) -> Any:
    kind = f.metadata["kind"]
    item = f.metadata["item"]

    if raw is None:
        if kind in (SECTION_LIST, ADDRESS_LIST):
            return ()
        if kind == BALANCES:
            return {}
        if kind in _STRING_KINDS:
            return ""
        raise TypeError(f"{path}: value is required")

    if kind in (UINT, INT, UINT32):
        if isinstance(raw, bool) or not isinstance(raw, int):
            raise TypeError(f"{path}: expected an integer, got {type(raw).__name__}")
        return raw
    if kind == BOOL:
        if not isinstance(raw, bool):
            raise TypeError(f"{path}: expected a boolean, got {type(raw).__name__}")
        return raw
    if kind == FLOAT:
        if isinstance(raw, bool) or not isinstance(raw, (int, float)):
            raise TypeError(f"{path}: expected a number, got {type(raw).__name__}")
        return float(raw)
    if kind in _STRING_KINDS:
        if kind in _NUMERIC_TEXT_KINDS and isinstance(raw, int) and not isinstance(raw, bool):
            return str(raw)
        if not isinstance(raw, str):
            raise TypeError(f"{path}: expected a string, got {type(raw).__name__}")
        return raw
    if kind == DURATION:
        try:
            return parse_duration(raw)
        except ValueError as exc:
            raise ValueError(f"{path}: {exc}") from exc
    if kind == BALANCES:
        if not isinstance(raw, dict):
            raise TypeError(f"{path}: expected a mapping, got {type(raw).__name__}")
        balances: dict[str, str] = {}
        for addr, amount in raw.items():
            if not isinstance(addr, str):
                raise TypeError(f"{path}: address keys must be strings, got {addr!r}")
            if isinstance(amount, int) and not isinstance(amount, bool):
                amount = str(amount)
            if not isinstance(amount, str):
                raise TypeError(f"{_join(path, addr)}: expected a decimal string")
            balances[addr] = amount
        return balances
    if kind == ADDRESS_LIST:
        if not isinstance(raw, (list, tuple)):
            raise TypeError(f"{path}: expected a list, got {type(raw).__name__}")
        for index, value in enumerate(raw):
            if not isinstance(value, str):
                raise TypeError(f"{path}[{index}]: expected a string")
        return tuple(raw)
    if kind == SECTION:
        return item.from_dict(raw, path)
    if kind == SECTION_LIST:
        if not isinstance(raw, (list, tuple)):
            raise TypeError(f"{path}: expected a list, got {type(raw).__name__}")
        return tuple(item.from_dict(value, f"{path}[{index}]") for index, value in enumerate(raw))
    raise AssertionError(f"unhandled field kind {kind}")


def _export(f: Any, value: Any) -> Any:
    kind = f.metadata["kind"]
    if kind == SECTION:
        return value.to_dict()
    if kind == SECTION_LIST:
        return [entry.to_dict() for entry in value]
    if kind == ADDRESS_LIST:
        return list(value)
    if kind == BALANCES:
        return dict(value)
    if kind == DURATION:
        return format_duration(value)
    return value


class Section:
    @classmethod
    def from_dict(cls, data: Any, path: str = "") -> Any:
        if not isinstance(data, dict):
            raise TypeError(f"{path or 'genesis'}: expected a mapping, got {type(data).__name__}")
        declared = {f.metadata["key"]: f for f in fields(cls)}
        unknown = sorted(str(key) for key in data if key not in declared)
        if unknown:
            raise KeyError(f"{path or 'genesis'}: unknown keys {', '.join(unknown)}")
        kwargs = {}
        for key, f in declared.items():
            if key in data:
                kwargs[f.name] = _coerce(f, data[key], _join(path, key))
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        return {f.metadata["key"]: _export(f, getattr(self, f.name)) for f in fields(self)}


@dataclass(frozen=True)
class Blockchain(Section, ForkGates):
    timestamp: int = _field("timestamp", 1_546_329_600, kind=INT)
    block_gas_limit: int = _field("blockGasLimit", 20_000_000, kind=UINT)
    action_gas_limit: int = _field("actionGasLimit", 5_000_000, kind=UINT)
    block_interval: timedelta = _field("blockInterval", timedelta(seconds=10), kind=DURATION)
    num_sub_epochs: int = _field("numSubEpochs", 2, kind=UINT)
    dardanelles_num_sub_epochs: int = _field("dardanellesNumSubEpochs", 30, kind=UINT)
    num_delegates: int = _field("numDelegates", 24, kind=UINT)
    num_candidate_delegates: int = _field("numCandidateDelegates", 36, kind=UINT)
    time_based_rotation: bool = _field("timeBasedRotation", False, kind=BOOL)
    pacific_block_height: int = _fork_field("pacific")
    aleutian_block_height: int = _fork_field("aleutian")
    bering_block_height: int = _fork_field("bering")
    cook_block_height: int = _fork_field("cook")
    dardanelles_block_height: int = _fork_field("dardanelles")
    daytona_block_height: int = _fork_field("daytona")
    easter_block_height: int = _fork_field("easter")
    fbk_migration_block_height: int = _fork_field("fbk_migration")
    fairbank_block_height: int = _fork_field("fairbank")
    greenland_block_height: int = _fork_field("greenland")
    hawaii_block_height: int = _fork_field("hawaii")
    iceland_block_height: int = _fork_field("iceland")
    jutland_block_height: int = _fork_field("jutland")
    kamchatka_block_height: int = _fork_field("kamchatka")
    lord_howe_block_height: int = _fork_field("lord_howe")
    midway_block_height: int = _fork_field("midway")
    newfoundland_block_height: int = _fork_field("newfoundland")
    okhotsk_block_height: int = _fork_field("okhotsk")
    palau_block_height: int = _fork_field("palau")
    quebec_block_height: int = _fork_field("quebec")
    redsea_block_height: int = _fork_field("redsea")
    sumatra_block_height: int = _fork_field("sumatra")
    to_be_enabled_block_height: int = _fork_field("to_be_enabled")


@dataclass(frozen=True)
class Account(Section):
    init_balance_map: dict[str, str] = _field("initBalances", kind=BALANCES, default_factory=dict)

    def init_balances(self) -> tuple[list[Address], list[int]]:
        """Return genesis accounts and their balances, ordered by address string.

        The i-th amount is the i-th address' balance.
        """
        addrs: list[Address] = []
        amounts: list[int] = []
        for addr_str in sorted(self.init_balance_map):
            addrs.append(_address(addr_str, "init balance address"))
            amounts.append(_amount(self.init_balance_map[addr_str], "init balance"))
        return addrs, amounts


@dataclass(frozen=True)
class Delegate(Section):
    operator_addr_str: str = _field("operatorAddr", "", kind=ADDRESS)
    reward_addr_str: str = _field("rewardAddr", "", kind=OPTIONAL_ADDRESS)
    votes_str: str = _field("votes", "0", kind=AMOUNT)

    def operator_addr(self) -> Address:
        return _address(self.operator_addr_str, "delegate operator address")

    def reward_addr(self) -> Address | None:
        if self.reward_addr_str == "":
            return None
        return _address(self.reward_addr_str, "delegate reward address")

    def votes(self) -> int:
        return _amount(self.votes_str, "delegate votes")


@dataclass(frozen=True)
class Poll(Section):
    poll_mode: str = _field("pollMode", "nativeMix", kind=STR)
    enable_gravity_chain_voting: bool = _field("enableGravityChainVoting", True, kind=BOOL)
    gravity_chain_start_height: int = _field("gravityChainStartHeight", 0, kind=UINT)
    gravity_chain_ceiling_height: int = _field("gravityChainCeilingHeight", 10_199_000, kind=UINT)
    gravity_chain_height_interval: int = _field("gravityChainHeightInterval", 0, kind=UINT)
    register_contract_address: str = _field("registerContractAddress", "", kind=OPTIONAL_ADDRESS)
    staking_contract_address: str = _field("stakingContractAddress", "", kind=OPTIONAL_ADDRESS)
    native_staking_contract_address: str = _field("nativeStakingContractAddress", "", kind=OPTIONAL_ADDRESS)
    native_staking_contract_code: str = _field("nativeStakingContractCode", "", kind=STR)
    consortium_committee_contract_code: str = _field("consortiumCommitteeContractCode", "", kind=STR)
    vote_threshold: str = _field("voteThreshold", "", kind=THRESHOLD)
    score_threshold: str = _field("scoreThreshold", "", kind=THRESHOLD)
    self_staking_threshold: str = _field("selfStakingThreshold", "", kind=THRESHOLD)
    delegates: tuple[Delegate, ...] = _field("delegates", (), kind=SECTION_LIST, item=Delegate)
    probation_epoch_period: int = _field("probationEpochPeriod", 6, kind=UINT)
    probation_intensity_rate: int = _field("probationIntensityRate", 90, kind=UINT32)
    unproductive_delegate_max_cache_size: int = _field("unproductiveDelegateMaxCacheSize", 20, kind=UINT)
    system_staking_contract_address: str = _field(
        "systemStakingContractAddress",
        "io1drde9f483guaetl3w3w6n6y7yv80f8fael7qme",
        kind=OPTIONAL_ADDRESS,
    )
    system_staking_contract_height: int = _field("systemStakingContractHeight", 24_486_464, kind=UINT)
    system_sgd_contract_address: str = _field("systemSGDContractAddress", "", kind=OPTIONAL_ADDRESS)
    system_sgd_contract_height: int = _field("systemSGDContractHeight", 0, kind=UINT)

    def _threshold(self, value: str, what: str) -> int:
        if value == "":
            return 0
        return _amount(value, what)

    def vote_threshold_amount(self) -> int:
        return self._threshold(self.vote_threshold, "poll vote threshold")

    def score_threshold_amount(self) -> int:
        return self._threshold(self.score_threshold, "poll score threshold")

    def self_staking_threshold_amount(self) -> int:
        return self._threshold(self.self_staking_threshold, "poll self-staking threshold")

    def system_staking_contract(self) -> Address | None:
        if self.system_staking_contract_address == "":
            return None
        return _address(self.system_staking_contract_address, "system staking contract address")


@dataclass(frozen=True)
class Rewarding(Section):
    init_balance_str: str = _field("initBalance", iotx_to_rau_str(200_000_000), kind=AMOUNT)
    block_reward_str: str = _field("blockReward", iotx_to_rau_str(16), kind=AMOUNT)
    dardanelles_block_reward_str: str = _field("dardanellesBlockReward", iotx_to_rau_str(8), kind=AMOUNT)
    epoch_reward_str: str = _field("epochReward", iotx_to_rau_str(12_500), kind=AMOUNT)
    aleutian_epoch_reward_str: str = _field("aleutianEpochReward", iotx_to_rau_str(18_750), kind=AMOUNT)
    num_delegates_for_epoch_reward: int = _field("numDelegatesForEpochReward", 100, kind=UINT)
    exempt_addr_strs_from_epoch_reward: tuple[str, ...] = _field(
        "exemptAddrsFromEpochReward", (), kind=ADDRESS_LIST
    )
    foundation_bonus_str: str = _field("foundationBonus", iotx_to_rau_str(80), kind=AMOUNT)
    num_delegates_for_foundation_bonus: int = _field("numDelegatesForFoundationBonus", 36, kind=UINT)
    foundation_bonus_last_epoch: int = _field("foundationBonusLastEpoch", 8_760, kind=UINT)
    foundation_bonus_p2_start_epoch: int = _field("foundationBonusP2StartEpoch", 9_698, kind=UINT)
    foundation_bonus_p2_end_epoch: int = _field("foundationBonusP2EndEpoch", 18_458, kind=UINT)
    productivity_threshold: int = _field("productivityThreshold", 0, kind=UINT)

    def init_balance(self) -> int:
        return _amount(self.init_balance_str, "rewarding init balance")

    def block_reward(self) -> int:
        return _amount(self.block_reward_str, "block reward")

    def dardanelles_block_reward(self) -> int:
        return _amount(self.dardanelles_block_reward_str, "dardanelles block reward")

    def epoch_reward(self) -> int:
        return _amount(self.epoch_reward_str, "epoch reward")

    def aleutian_epoch_reward(self) -> int:
        return _amount(self.aleutian_epoch_reward_str, "aleutian epoch reward")

    def foundation_bonus(self) -> int:
        return _amount(self.foundation_bonus_str, "foundation bonus")

    def exempt_addrs_from_epoch_reward(self) -> list[Address]:
        return [_address(addr, "epoch reward exempt address") for addr in self.exempt_addr_strs_from_epoch_reward]


@dataclass(frozen=True)
class VoteWeightCalConsts(Section):
    duration_lg: float = _field("durationLg", 1.2, kind=FLOAT)
    auto_stake: float = _field("autoStake", 1.0, kind=FLOAT)
    self_stake: float = _field("selfStake", 1.06, kind=FLOAT)


@dataclass(frozen=True)
class RegistrationConsts(Section):
    fee: str = _field("fee", iotx_to_rau_str(100), kind=AMOUNT)
    min_self_stake: str = _field("minSelfStake", iotx_to_rau_str(1_200_000), kind=AMOUNT)

    def fee_amount(self) -> int:
        return _amount(self.fee, "candidate registration fee")

    def min_self_stake_amount(self) -> int:
        return _amount(self.min_self_stake, "candidate minimum self-stake")


@dataclass(frozen=True)
class BootstrapCandidate(Section):
    owner_address: str = _field("ownerAddress", "", kind=ADDRESS)
    operator_address: str = _field("operatorAddress", "", kind=ADDRESS)
    reward_address: str = _field("rewardAddress", "", kind=ADDRESS)
    name: str = _field("name", "", kind=STR)
    self_staking_tokens: str = _field("selfStakingTokens", "0", kind=AMOUNT)

    def owner(self) -> Address:
        return _address(self.owner_address, "bootstrap candidate owner address")

    def operator(self) -> Address:
        return _address(self.operator_address, "bootstrap candidate operator address")

    def reward(self) -> Address:
        return _address(self.reward_address, "bootstrap candidate reward address")

    def self_staking_amount(self) -> int:
        return _amount(self.self_staking_tokens, "bootstrap candidate self-staking tokens")


@dataclass(frozen=True)
class Staking(Section):
    vote_weight_cal_consts: VoteWeightCalConsts = _field(
        "voteWeightCalConsts", kind=SECTION, item=VoteWeightCalConsts, default_factory=VoteWeightCalConsts
    )
    registration_consts: RegistrationConsts = _field(
        "registrationConsts", kind=SECTION, item=RegistrationConsts, default_factory=RegistrationConsts
    )
    withdraw_waiting_period: timedelta = _field("withdrawWaitingPeriod", timedelta(days=3), kind=DURATION)
    min_stake_amount: str = _field("minStakeAmount", iotx_to_rau_str(100), kind=AMOUNT)
    bootstrap_candidates: tuple[BootstrapCandidate, ...] = _field(
        "bootstrapCandidates", (), kind=SECTION_LIST, item=BootstrapCandidate
    )

    def min_stake(self) -> int:
        return _amount(self.min_stake_amount, "minimum stake amount")


@dataclass(frozen=True)
class Genesis(Section):
    """Network-wide genesis config.

    Every node participating in the same network must run with exactly the
    same genesis; ``hash()`` fingerprints the consensus-relevant subset.
    """

    blockchain: Blockchain = _field("blockchain", kind=SECTION, item=Blockchain, default_factory=Blockchain)
    account: Account = _field("account", kind=SECTION, item=Account, default_factory=Account)
    poll: Poll = _field("poll", kind=SECTION, item=Poll, default_factory=Poll)
    rewarding: Rewarding = _field("rewarding", kind=SECTION, item=Rewarding, default_factory=Rewarding)
    staking: Staking = _field("staking", kind=SECTION, item=Staking, default_factory=Staking)

    def hash(self) -> bytes:
        from .fingerprint import genesis_hash

        return genesis_hash(self)

    def hash_hex(self) -> str:
        return self.hash().hex()


def default_config() -> Genesis:
    return Genesis()


TEST_INIT_BALANCE_IOTX = 100_000_000


def apply_test_overlay(genesis: Genesis, identities: Iterable[Any] | None = None) -> Genesis:
    """Fund deterministic identities and make the first ``num_delegates`` of them delegates.

    Returns a new tree. Pacific is forced to height 0 so test networks start
    with every early-era rule active.
    """
    if identities is None:
        from .identityset import identities as identity_set

        identities = identity_set()

    value = iotx_to_rau_str(TEST_INIT_BALANCE_IOTX)
    balances = dict(genesis.account.init_balance_map)
    delegates = list(genesis.poll.delegates)
    registered = {d.operator_addr_str for d in delegates}
    for index, ident in enumerate(identities):
        addr = ident.address_str
        balances[addr] = value
        if index < genesis.blockchain.num_delegates and addr not in registered:
            delegates.append(Delegate(operator_addr_str=addr, reward_addr_str=addr, votes_str=value))
            registered.add(addr)

    logger.debug("Applied test overlay: %d funded identities, %d delegates", len(balances), len(delegates))
    return replace(
        genesis,
        blockchain=replace(genesis.blockchain, pacific_block_height=0),
        account=replace(genesis.account, init_balance_map=balances),
        poll=replace(genesis.poll, delegates=tuple(delegates)),
    )


def testnet_default() -> Genesis:
    return apply_test_overlay(default_config())
