"""Internal constants shared across the library."""

WALLET_FILE = ".wallet.json"
USER_AGENT = "pynostrwallet"

#: Environment variable consulted for the identity after an explicit override.
NSEC_ENV_VAR = "NSEC"

#: Mint info is refreshed once an entry is older than this (seconds).
MINT_INFO_TTL: float = 3600.0

#: Racing deposits resolve as pending once this deadline passes (seconds).
DEPOSIT_TIMEOUT: float = 10 * 60

DEFAULT_RELAYS: tuple[str, ...] = (
    "wss://relay.damus.io",
    "wss://nos.lol",
    "wss://relay.nostr.band",
    "wss://nostr.mutinywallet.com",
)

DEFAULT_MINTS: tuple[str, ...] = (
    "https://mint.coinos.io",
    "https://mint.lnvoltz.com",
    "https://mint.chorus.community",
)

# ------------------------------------------------------------------
# Cashu (NUT-04 / NUT-06)
# ------------------------------------------------------------------

MINT_METHOD = "bolt11"
MINT_UNIT = "sat"
MINT_INFO_PATH = "/v1/info"
MINT_QUOTE_PATH = "/v1/mint/quote/bolt11"

#: Quote states after which the deposit is considered paid.
PAID_QUOTE_STATES: frozenset[str] = frozenset({"PAID", "ISSUED"})

MSATS_PER_SAT = 1000
