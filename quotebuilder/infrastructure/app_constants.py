APP_NAME = "Quote Builder"
APP_VERSION = "0.4.0"
APP_TITLE = f"{APP_NAME} v{APP_VERSION}"

# Keep QSettings identifiers consistent to avoid breaking existing settings.
SETTINGS_ORG = "QuoteBuilder"
SETTINGS_APP = "QuoteBuilderApp"

# Default paths
DRAFT_PATH = "drafts/quote_draft.json"
LOG_DIR = "logs"

# Draft load/save lifecycle logs here; it gets its own file.
DRAFT_LOGGER_NAME = "quotebuilder.drafts"
