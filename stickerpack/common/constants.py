"""Constants used throughout the application."""

# Sticker image limits shared with the sticker service and installing clients
STICKER_SIZE = 512
MIN_STICKER_DIMENSION = 10
MAX_STICKER_DIMENSION = STICKER_SIZE
MAX_STICKER_BYTE_LENGTH = 300 * 1024

STATIC_CONTENT_TYPE = "image/webp"
ANIMATED_CONTENT_TYPE = "image/png"
WEBP_QUALITY = 80

# Pack key material sizes (bytes)
PACK_KEY_LENGTH = 32
IV_LENGTH = 16
DERIVED_KEY_LENGTH = 64

# Credential item ids in the local item store
USERNAME_ITEM_ID = "uuid_id"
LEGACY_USERNAME_ITEM_ID = "number_id"
PASSWORD_ITEM_ID = "password"

# Default concurrency for CDN uploads
DEFAULT_UPLOAD_CONCURRENCY = 3

INSTALL_URL_BASE = "https://signal.art/addstickers/"

# Localization keys attached to errors
MESSAGE_KEY_PROCESSING = "StickerCreator--Toasts--errorProcessing"
MESSAGE_KEY_TOO_LARGE = "StickerCreator--Toasts--tooLarge"
MESSAGE_KEY_NOT_SQUARE = "StickerCreator--Toasts--APNG--notSquare"
MESSAGE_KEY_DIMENSIONS_TOO_LARGE = "StickerCreator--Toasts--APNG--dimensionsTooLarge"
MESSAGE_KEY_DIMENSIONS_TOO_SMALL = "StickerCreator--Toasts--APNG--dimensionsTooSmall"
MESSAGE_KEY_MUST_LOOP_FOREVER = "StickerCreator--Toasts--mustLoopForever"
MESSAGE_KEY_AUTHENTICATION = "StickerCreator--Authentication--error"
MESSAGE_KEY_UPLOAD = "StickerCreator--Toasts--upload-error"

DEFAULT_MESSAGES = {
    MESSAGE_KEY_PROCESSING: "Error processing image",
    MESSAGE_KEY_TOO_LARGE: "The selected image is too large",
    MESSAGE_KEY_NOT_SQUARE: "Animated images must be square",
    MESSAGE_KEY_DIMENSIONS_TOO_LARGE: "Animated images are too large",
    MESSAGE_KEY_DIMENSIONS_TOO_SMALL: "Animated images are too small",
    MESSAGE_KEY_MUST_LOOP_FOREVER: "Animated images must loop forever",
    MESSAGE_KEY_AUTHENTICATION: (
        "Please set up Signal on your phone and desktop to use the Sticker Pack Creator"
    ),
    MESSAGE_KEY_UPLOAD: "Sticker pack upload failed",
}
