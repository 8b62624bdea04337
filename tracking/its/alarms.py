"""ITS alarm classification.

ITS terminals report exceptional events as a two-letter status code, either in
the telemetry header or at the identity position after the device identifier:

    WD / EA = Emergency (SOS button, "watchdog" emergency)
    BL      = Battery low
    HB      = Harsh braking
    HA      = Harsh acceleration
    RT      = Rash turning (cornering)
    OS      = Over speed
    TA      = Tamper alert

Other codes (NR = normal report, IN/IF = ignition on/off, ...) are routine and
carry no alarm.
"""

from types import MappingProxyType

ALARM_SOS = "sos"
ALARM_LOW_BATTERY = "lowBattery"
ALARM_BRAKING = "hardBraking"
ALARM_ACCELERATION = "hardAcceleration"
ALARM_CORNERING = "hardCornering"
ALARM_OVERSPEED = "overspeed"
ALARM_TAMPERING = "tampering"

# Type header value sent by terminals in emergency mode
EMERGENCY_TYPE = "EMR"

_STATUS_TO_ALARM = MappingProxyType(
    {
        "WD": ALARM_SOS,
        "EA": ALARM_SOS,
        "BL": ALARM_LOW_BATTERY,
        "HB": ALARM_BRAKING,
        "HA": ALARM_ACCELERATION,
        "RT": ALARM_CORNERING,
        "OS": ALARM_OVERSPEED,
        "TA": ALARM_TAMPERING,
    }
)


def decode_alarm(status: str) -> str | None:
    """Map a two-letter status code to an alarm category.

    Returns:
        One of the ``ALARM_*`` constants, or None for routine or unknown codes

    Example:
        >>> decode_alarm("BL")
        'lowBattery'
        >>> decode_alarm("NR") is None
        True
    """
    return _STATUS_TO_ALARM.get(status)
