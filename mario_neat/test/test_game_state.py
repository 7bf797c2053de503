from mario_neat.game_state import GameSnapshot


def make_ram():
    ram = bytearray(0x800)
    ram[0x6D] = 2  # level page
    ram[0x86] = 0x40  # x on page
    ram[0x3B8] = 150
    ram[0x3AD] = 77
    ram[0x75A] = 3
    ram[0x760] = 1
    ram[0x500 + 13 * 16 + 2 * 16 + 5] = 0x54  # page 1, row 2, column 5
    # enemy slot 1 active, slot 3 inactive but with coordinates
    ram[0x0F + 1] = 1
    ram[0x6E + 1] = 3
    ram[0x87 + 1] = 0x10
    ram[0xCF + 1] = 100
    ram[0x6E + 3] = 9
    return ram


def test_from_ram_decodes_scalars():
    snapshot = GameSnapshot.from_ram(make_ram())
    assert snapshot.agent_x == 2 * 256 + 0x40
    assert snapshot.agent_y == 166
    assert snapshot.screen_x == 77
    assert snapshot.lives == 3
    assert snapshot.level == 1


def test_from_ram_decodes_tiles_and_enemies():
    snapshot = GameSnapshot.from_ram(make_ram())
    assert snapshot.tiles.shape == (2, 13, 16)
    assert snapshot.tiles[1, 2, 5] == 0x54
    assert int(snapshot.tiles.sum()) == 0x54
    assert snapshot.enemies == ((3 * 256 + 0x10, 124),)


def test_equality_ignores_tile_data():
    ram = make_ram()
    first = GameSnapshot.from_ram(ram)
    ram[0x500] = 1
    ram[0x0F] = 1
    assert GameSnapshot.from_ram(ram) == first
    ram[0x75A] = 2
    assert GameSnapshot.from_ram(ram) != first


def test_str():
    assert str(GameSnapshot(agent_x=5, agent_y=6, lives=2, level=1)) == (
        "Agent coords: (5, 6). Lives: 2. Screen X: 0. Level: 1"
    )
