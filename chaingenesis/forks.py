from __future__ import annotations

from typing import NamedTuple


MAX_HEIGHT = 2**64 - 1


class Fork(NamedTuple):
    name: str
    attribute: str
    key: str
    default_height: int


# Deployment order. Thresholds are expected to be non-decreasing in this order,
# but nothing checks it.
FORKS: tuple[Fork, ...] = (
    Fork("pacific", "pacific_block_height", "pacificHeight", 432_001),
    Fork("aleutian", "aleutian_block_height", "aleutianHeight", 864_001),
    Fork("bering", "bering_block_height", "beringHeight", 1_512_001),
    Fork("cook", "cook_block_height", "cookHeight", 1_641_601),
    Fork("dardanelles", "dardanelles_block_height", "dardanellesHeight", 1_816_201),
    Fork("daytona", "daytona_block_height", "daytonaBlockHeight", 3_238_921),
    Fork("easter", "easter_block_height", "easterHeight", 4_478_761),
    Fork("fbk_migration", "fbk_migration_block_height", "fbkMigrationHeight", 5_157_001),
    Fork("fairbank", "fairbank_block_height", "fairbankHeight", 5_165_641),
    Fork("greenland", "greenland_block_height", "greenlandHeight", 6_544_441),
    Fork("hawaii", "hawaii_block_height", "hawaiiHeight", 11_267_641),
    Fork("iceland", "iceland_block_height", "icelandHeight", 12_289_321),
    Fork("jutland", "jutland_block_height", "jutlandHeight", 13_685_401),
    Fork("kamchatka", "kamchatka_block_height", "kamchatkaHeight", 13_816_441),
    Fork("lord_howe", "lord_howe_block_height", "lordHoweHeight", 13_979_161),
    Fork("midway", "midway_block_height", "midwayHeight", 16_509_241),
    Fork("newfoundland", "newfoundland_block_height", "newfoundlandHeight", 17_662_681),
    Fork("okhotsk", "okhotsk_block_height", "okhotskHeight", 21_542_761),
    Fork("palau", "palau_block_height", "palauHeight", 22_991_401),
    Fork("quebec", "quebec_block_height", "quebecHeight", 24_838_201),
    Fork("redsea", "redsea_block_height", "redseaHeight", 26_704_441),
    Fork("sumatra", "sumatra_block_height", "sumatraHeight", 36_704_441),
    # Placeholder gate for work-in-progress features; inert until a release
    # assigns a real height.
    Fork("to_be_enabled", "to_be_enabled_block_height", "toBeEnabledHeight", MAX_HEIGHT),
)

FORKS_BY_NAME: dict[str, Fork] = {fork.name: fork for fork in FORKS}


def lookup(name: str) -> Fork:
    try:
        return FORKS_BY_NAME[name]
    except KeyError:
        raise KeyError(f"Unknown fork {name!r}") from None


class ForkGates:
    """Height gates over the fork heights stored on the host dataclass."""

    pacific_block_height: int
    aleutian_block_height: int
    bering_block_height: int
    cook_block_height: int
    dardanelles_block_height: int
    daytona_block_height: int
    easter_block_height: int
    fbk_migration_block_height: int
    fairbank_block_height: int
    greenland_block_height: int
    hawaii_block_height: int
    iceland_block_height: int
    jutland_block_height: int
    kamchatka_block_height: int
    lord_howe_block_height: int
    midway_block_height: int
    newfoundland_block_height: int
    okhotsk_block_height: int
    palau_block_height: int
    quebec_block_height: int
    redsea_block_height: int
    sumatra_block_height: int
    to_be_enabled_block_height: int

    def fork_height(self, name: str) -> int:
        return getattr(self, lookup(name).attribute)

    def is_active(self, name: str, height: int) -> bool:
        return height >= self.fork_height(name)

    def active_forks(self, height: int) -> list[str]:
        return [fork.name for fork in FORKS if height >= getattr(self, fork.attribute)]

    def is_pacific(self, height: int) -> bool:
        return height >= self.pacific_block_height

    def is_aleutian(self, height: int) -> bool:
        return height >= self.aleutian_block_height

    def is_bering(self, height: int) -> bool:
        return height >= self.bering_block_height

    def is_cook(self, height: int) -> bool:
        return height >= self.cook_block_height

    def is_dardanelles(self, height: int) -> bool:
        return height >= self.dardanelles_block_height

    def is_daytona(self, height: int) -> bool:
        return height >= self.daytona_block_height

    def is_easter(self, height: int) -> bool:
        return height >= self.easter_block_height

    def is_fbk_migration(self, height: int) -> bool:
        return height >= self.fbk_migration_block_height

    def is_fairbank(self, height: int) -> bool:
        return height >= self.fairbank_block_height

    def is_greenland(self, height: int) -> bool:
        return height >= self.greenland_block_height

    def is_hawaii(self, height: int) -> bool:
        return height >= self.hawaii_block_height

    def is_iceland(self, height: int) -> bool:
        return height >= self.iceland_block_height

    def is_jutland(self, height: int) -> bool:
        return height >= self.jutland_block_height

    def is_kamchatka(self, height: int) -> bool:
        return height >= self.kamchatka_block_height

    def is_lord_howe(self, height: int) -> bool:
        return height >= self.lord_howe_block_height

    def is_midway(self, height: int) -> bool:
        return height >= self.midway_block_height

    def is_newfoundland(self, height: int) -> bool:
        return height >= self.newfoundland_block_height

    def is_okhotsk(self, height: int) -> bool:
        return height >= self.okhotsk_block_height

    def is_palau(self, height: int) -> bool:
        return height >= self.palau_block_height

    def is_quebec(self, height: int) -> bool:
        return height >= self.quebec_block_height

    def is_redsea(self, height: int) -> bool:
        return height >= self.redsea_block_height

    def is_sumatra(self, height: int) -> bool:
        return height >= self.sumatra_block_height

    def is_to_be_enabled(self, height: int) -> bool:
        return height >= self.to_be_enabled_block_height
