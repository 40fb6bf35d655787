"""batchexecute rpc ids and extension field tags"""

from enum import StrEnum


class RpcId(StrEnum):
    # page and info endpoints, each with its own response grammar
    LIBRARY_TIMELINE = "lcxiM"
    LOCKED_FOLDER = "nMFwOc"
    LIBRARY_GENERIC = "EzkLib"
    SHARED_LINKS = "F2A0H"
    ALBUMS = "Z5xsfc"
    ALBUM_ITEMS = "snAcKc"
    TRASH = "zy0IHe"
    ITEM_INFO = "VrseUb"
    ITEM_INFO_EXT = "fDcn4b"
    BULK_MEDIA_INFO = "EWgK9e"

    # action endpoints, results are passed through undecoded
    MODIFY_TRASH = "XwAOJf"
    CREATE_ALBUM = "OXvT9d"
    ADD_TO_ALBUM = "laUYf"
    ADD_TO_SHARED_ALBUM = "C2V01c"
    SET_FAVORITE = "Ftfh0"
    SET_ARCHIVE = "w7TP3c"
    MOVE_TO_LOCKED_FOLDER = "StLnCe"
    REMOVE_FROM_LOCKED_FOLDER = "Pp2Xxe"
    SET_DESCRIPTION = "AQNOFd"


# Keys of the trailing extension map element of a raw item.
FAVORITE_TAG = 163238866
DURATION_TAG = 76647426
DESCRIPTION_SHORT_TAG = 396644657
LIVE_PHOTO_TAG = 146008172
ALBUM_METADATA_TAG = 72930366

# Marker in an item's [7] entries for media owned by someone else.
NOT_OWNED_MARKER = 27
