"""
Constants for _fbc / _fbp tokens

Cookie 名稱、存活時間、appendix 格式與 IP 判斷用的 regex。
"""

import re

# Cookie names
FBC_NAME_STRING = "_fbc"
FBP_NAME_STRING = "_fbp"

# First-party cookie 存活時間 (90 天, 秒)
DEFAULT_1PC_AGE = 90 * 24 * 3600

# Click ID source
FBCLID_STRING = "fbclid"
CLICK_ID_STRING = "clickID"

# Token 結構
TOKEN_TAG = "fb"
MIN_PAYLOAD_SPLIT_LENGTH = 4
MAX_PAYLOAD_WITH_LANGUAGE_TOKEN_SPLIT_LENGTH = 5

# Appendix 長度: V1 = 2 字元 language token, V2 = 8 字元 base64url
APPENDIX_LENGTH_V1 = 2
APPENDIX_LENGTH_V2 = 8

# Appendix byte layout
DEFAULT_FORMAT = 0x01
LANGUAGE_TOKEN_INDEX = 0x03  # python
LANGUAGE_TOKEN = "Aw"  # base64url(bytes([LANGUAGE_TOKEN_INDEX]))

# 舊版 SDK 的 2 字元 language tokens (base64url of 0x01..0x06)
SUPPORTED_LANGUAGES_TOKEN = ["AQ", "Ag", "Aw", "BA", "BQ", "Bg"]

# Change type byte
APPENDIX_NO_CHANGE = 0x00
APPENDIX_GENERAL_NEW = 0x01
APPENDIX_NET_NEW = 0x02
APPENDIX_MODIFIED_NEW = 0x03

# _fbp random payload 上限 (exclusive), 31-bit
FBP_RANDOM_UPPER_BOUND = 2147483647

IPV4_REGEX = re.compile(
    r"^((25[0-5]|(2[0-4]|1\d|[1-9]|)\d)\.){3}(25[0-5]|(2[0-4]|1\d|[1-9]|)\d)$"
)
IPV6_SEG_REGEX = re.compile(r"^[0-9a-fA-F]{1,4}$")
DIGITS_REGEX = re.compile(r"^[0-9]+$")
