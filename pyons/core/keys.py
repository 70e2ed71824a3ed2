"""Literal property keys understood by `FactoryProperty`.

These names double as the vocabulary of the `~/ons/credential` file, so they
must never be renamed.
"""

LOG_PATH = "LogPath"
PRODUCER_ID = "ProducerId"
CONSUMER_ID = "ConsumerId"
GROUP_ID = "GroupId"
ACCESS_KEY = "AccessKey"
SECRET_KEY = "SecretKey"
MESSAGE_MODEL = "MessageModel"
SEND_MSG_TIMEOUT_MILLIS = "SendMsgTimeoutMillis"
SUSPEND_TIME_MILLIS = "SuspendTimeMillis"
SEND_MSG_RETRY_TIMES = "SendMsgRetryTimes"
MAX_MSG_CACHE_SIZE = "MaxMsgCacheSize"
MAX_CACHED_MESSAGE_SIZE_IN_MIB = "MaxCachedMessageSizeInMiB"
ONS_ADDR = "ONSAddr"  # name server domain name
NAMESRV_ADDR = "NAMESRV_ADDR"  # name server ip address
CONSUME_THREAD_NUMS = "ConsumeThreadNums"
ONS_CHANNEL = "OnsChannel"
ONS_TRACE_SWITCH = "OnsTraceSwitch"
CONSUMER_INSTANCE_NAME = "ConsumerInstanceName"
INSTANCE_ID = "InstanceId"

ALL_KEYS = (
    LOG_PATH,
    PRODUCER_ID,
    CONSUMER_ID,
    GROUP_ID,
    ACCESS_KEY,
    SECRET_KEY,
    MESSAGE_MODEL,
    SEND_MSG_TIMEOUT_MILLIS,
    SUSPEND_TIME_MILLIS,
    SEND_MSG_RETRY_TIMES,
    MAX_MSG_CACHE_SIZE,
    MAX_CACHED_MESSAGE_SIZE_IN_MIB,
    ONS_ADDR,
    NAMESRV_ADDR,
    CONSUME_THREAD_NUMS,
    ONS_CHANNEL,
    ONS_TRACE_SWITCH,
    CONSUMER_INSTANCE_NAME,
    INSTANCE_ID,
)

# Keys imported from the credential file, in import order.
CREDENTIAL_FILE_KEYS = (ACCESS_KEY, SECRET_KEY, NAMESRV_ADDR, GROUP_ID)

DEFAULT_CHANNEL = "ALIYUN"
