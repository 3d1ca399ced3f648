# badger/core/phrases/wordlists.py
"""Word lists for the ``words`` phrase generator: adverb-adjective-noun."""

ADVERBS: tuple[str, ...] = (
    "absolutely", "actually", "amazingly", "awfully", "barely", "boldly", "brightly",
    "briskly", "calmly", "carefully", "cheerfully", "clearly", "cleverly", "closely",
    "curiously", "daringly", "deeply", "delightfully", "eagerly", "easily", "endlessly",
    "especially", "evenly", "extremely", "fairly", "famously", "fiercely", "fondly",
    "freely", "gently", "gladly", "gracefully", "happily", "highly", "honestly",
    "hugely", "incredibly", "joyfully", "keenly", "kindly", "lazily", "lightly",
    "loudly", "lovingly", "madly", "merrily", "mostly", "neatly", "nicely", "oddly",
    "openly", "perfectly", "playfully", "politely", "proudly", "quickly", "quietly",
    "rarely", "really", "remarkably", "seriously", "sharply", "silently", "simply",
    "slowly", "smoothly", "softly", "strangely", "strongly", "suddenly", "surely",
    "sweetly", "swiftly", "terribly", "totally", "truly", "unusually", "utterly",
    "very", "warmly", "wildly", "wisely",
)

ADJECTIVES: tuple[str, ...] = (
    "agile", "ancient", "bouncy", "brave", "bright", "bubbly", "busy", "calm",
    "candid", "clever", "cosmic", "crafty", "crisp", "curious", "dapper", "daring",
    "dazzling", "eager", "electric", "elegant", "epic", "fancy", "fearless", "fluffy",
    "friendly", "frosty", "fuzzy", "gentle", "giant", "gleaming", "golden", "grand",
    "happy", "hidden", "humble", "jolly", "keen", "kind", "lively", "lucky", "magic",
    "mellow", "mighty", "modern", "nimble", "noble", "peaceful", "plucky", "polite",
    "proud", "quick", "quiet", "radiant", "rapid", "rustic", "shiny", "silent",
    "silly", "sleepy", "smart", "snappy", "snowy", "sparkly", "speedy", "spicy",
    "steady", "sturdy", "sunny", "super", "swift", "tidy", "tiny", "trusty", "vivid",
    "wacky", "warm", "wise", "witty", "zany", "zesty",
)

NOUNS: tuple[str, ...] = (
    "acorn", "anchor", "apple", "badger", "balloon", "beacon", "beetle", "bison",
    "blossom", "breeze", "canyon", "castle", "cloud", "comet", "compass", "coral",
    "cricket", "crystal", "dolphin", "dragon", "eagle", "ember", "falcon", "feather",
    "fern", "firefly", "forest", "fox", "galaxy", "garden", "glacier", "harbor",
    "hedgehog", "heron", "island", "jaguar", "kettle", "kite", "lantern", "lemur",
    "lighthouse", "lizard", "maple", "meadow", "meteor", "moose", "mountain", "nebula",
    "oasis", "octopus", "orchard", "otter", "owl", "panda", "pebble", "penguin",
    "pepper", "planet", "puffin", "quill", "rabbit", "raven", "river", "robot",
    "rocket", "sailboat", "salmon", "squirrel", "starfish", "sunflower", "teapot",
    "thunder", "tiger", "tortoise", "trumpet", "tulip", "turtle", "volcano", "walrus",
    "whale", "willow", "wizard", "yak", "zebra",
)

__all__ = ["ADVERBS", "ADJECTIVES", "NOUNS"]
