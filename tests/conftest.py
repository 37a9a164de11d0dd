from __future__ import annotations

import pytest

# Plain English prose, ASCII only, long enough for per-column statistics at
# key lengths up to 15.
PASSAGE = (
    "The harbour town had been built on a slope so steep that most of the "
    "streets were really stairs, and the houses stood one above the other like "
    "spectators in a theatre, all of them facing the sea. In the summer the "
    "fishing boats went out before dawn and came back in the middle of the "
    "afternoon, and the whole town would gather on the quay to watch the catch "
    "being landed. The children ran between the crates and the old men argued "
    "about the weather, while the women who ran the market stalls called out "
    "the prices of the morning. Nobody was ever in a hurry, and nobody seemed "
    "to mind that the clock on the church tower had been stopped for as long "
    "as anyone could remember.\n"
    "Maria had lived in the town for all of her life. Her father had been a "
    "fisherman, and his father before him, and she had grown up with the smell "
    "of salt and tar and the sound of the gulls over the water. When she was "
    "young she had wanted nothing more than to leave, to go to the city in the "
    "north where her cousin worked in an office and wore a different dress "
    "every day of the week. But the years had passed, and she had married, and "
    "her husband had taken over the boat, and somehow the city had never come "
    "any closer. Now she kept the small shop at the bottom of the main stair, "
    "where she sold bread and coffee and newspapers that were always a day "
    "late, and she found that she did not regret it as much as she had thought "
    "she would.\n"
    "In the evenings, when the shop was closed, she liked to walk out along the "
    "harbour wall to the lighthouse at the end. From there she could see the "
    "whole of the bay, and on a clear night the lights of the villages along "
    "the coast, strung out like beads on a thread. Sometimes she would meet the "
    "keeper, an old man with a white beard who had been in the navy, and they "
    "would talk for a while about nothing in particular. He told her stories "
    "about the places he had seen, the ports of the south where the houses "
    "were painted blue and the markets sold fruit she had never heard of, and "
    "she listened and tried to picture them. It was enough, she thought, to "
    "know that such places existed, even if she would never visit them.\n"
    "That autumn the storms came early. For three days the wind blew from the "
    "west without stopping, and the boats stayed tied up in the harbour while "
    "the waves broke over the wall and ran in white sheets across the quay. On "
    "the fourth morning the sky cleared and the sea went flat and grey, and the "
    "men went down to inspect the damage. Two of the smaller boats had been "
    "torn loose and lost, and the roof of the fish market had been lifted off "
    "and dropped into the street behind it. But nobody had been hurt, and by "
    "the end of the week the roof was back on and the boats were going out "
    "again, as if nothing at all had happened."
)


@pytest.fixture
def passage() -> bytes:
    return PASSAGE.encode("ascii")
