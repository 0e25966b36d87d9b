"""Linux input scan codes (``getevent``) → Android key codes."""

from __future__ import annotations

KEYCODE_UNKNOWN = 0

SCAN_TO_KEYCODE: dict[int, int] = {
    1: 111,     # KEY_ESC -> ESCAPE
    2: 8, 3: 9, 4: 10, 5: 11, 6: 12, 7: 13, 8: 14, 9: 15, 10: 16, 11: 7,  # digits
    28: 66,     # KEY_ENTER
    102: 3,     # KEY_HOME
    103: 19,    # KEY_UP -> DPAD_UP
    105: 21,    # KEY_LEFT
    106: 22,    # KEY_RIGHT
    108: 20,    # KEY_DOWN
    113: 164,   # KEY_MUTE -> VOLUME_MUTE
    114: 25,    # KEY_VOLUMEDOWN
    115: 24,    # KEY_VOLUMEUP
    116: 26,    # KEY_POWER
    119: 127,   # KEY_PAUSE -> MEDIA_PAUSE
    139: 82,    # KEY_MENU
    158: 4,     # KEY_BACK
    163: 87,    # KEY_NEXTSONG -> MEDIA_NEXT
    164: 85,    # KEY_PLAYPAUSE
    165: 88,    # KEY_PREVIOUSSONG
    166: 86,    # KEY_STOPCD -> MEDIA_STOP
    168: 89,    # KEY_REWIND
    172: 3,     # KEY_HOMEPAGE -> HOME
    207: 126,   # KEY_PLAY
    208: 90,    # KEY_FASTFORWARD
    217: 84,    # KEY_SEARCH
    352: 23,    # KEY_OK -> DPAD_CENTER
    353: 23,    # KEY_SELECT
    358: 165,   # KEY_INFO
    365: 172,   # KEY_EPG -> GUIDE
    377: 170,   # KEY_TV
    402: 166,   # KEY_CHANNELUP
    403: 167,   # KEY_CHANNELDOWN
    582: 231,   # KEY_VOICECOMMAND -> VOICE_ASSIST
}


def android_keycode(scan_code: int) -> int:
    return SCAN_TO_KEYCODE.get(scan_code, KEYCODE_UNKNOWN)
