"""
Recording line format.

One line per subsystem per tick, comma separated, no header:

  E,startTemp,startHumid,startMoist,extTempRate,extHumidRate,extMoistRate,intervalSec
  T,currentTemp,upper,lower,heatRate,coolRate,furnaceOn,airConOn,intervalSec
  H,currentHumid,upper,lower,riseRate,humidifierOn,intervalSec
  M,currentMoist,upper,lower,riseRate,sprinklerOn,intervalSec

Floats are written with two decimals, bands as integers, device
flags as 0/1 and the trailing interval in whole seconds.
"""

import math
from collections import namedtuple

from greenhouse.errors import PlaybackFormatError

ENVIRONMENT = 'E'
TEMPERATURE = 'T'
HUMIDITY = 'H'
MOISTURE = 'M'

LAYOUTS = {
    ENVIRONMENT: ('start_temp', 'start_humidity', 'start_moisture',
                  'temp_rate', 'humidity_rate', 'moisture_rate'),
    TEMPERATURE: ('current', 'upper', 'lower', 'heat_rate', 'cool_rate',
                  'furnace_on', 'aircon_on'),
    HUMIDITY: ('current', 'upper', 'lower', 'rate', 'device_on'),
    MOISTURE: ('current', 'upper', 'lower', 'rate', 'device_on'),
}

BAND_FIELDS = frozenset(('upper', 'lower'))
FLAG_FIELDS = frozenset(('furnace_on', 'aircon_on', 'device_on'))

Record = namedtuple('Record', ['tag', 'fields', 'interval'])


def _format_field(name, value):
    if name in FLAG_FIELDS:
        return '1' if value else '0'
    if name in BAND_FIELDS:
        return str(int(value))
    return f"{float(value):.2f}"


def encode_record(record):
    """Render a Record as one line (no newline)."""
    layout = LAYOUTS.get(record.tag)
    if layout is None:
        raise ValueError(f"Unknown record tag: {record.tag!r}")
    parts = [record.tag]
    parts.extend(_format_field(name, record.fields[name]) for name in layout)
    parts.append(str(int(record.interval)))
    return ','.join(parts)


def _parse_number(line, text):
    try:
        value = float(text)
    except ValueError:
        raise PlaybackFormatError(line) from None
    if not math.isfinite(value):
        raise PlaybackFormatError(line)
    return value


def _parse_flag(line, text):
    if text.strip() not in ('0', '1'):
        raise PlaybackFormatError(line)
    return text.strip() == '1'


def _parse_interval(line, text):
    try:
        interval = int(text)
    except ValueError:
        raise PlaybackFormatError(line) from None
    if interval < 0:
        raise PlaybackFormatError(line)
    return interval


def parse_record(line):
    """
    Parse one recorded line.

    Returns None for blank lines and unknown tags so newer recordings
    stay readable. Raises PlaybackFormatError when a known tag carries
    missing or malformed fields.
    """
    text = line.rstrip('\r\n')
    if not text.strip():
        return None
    parts = text.split(',')
    tag = parts[0].strip()
    layout = LAYOUTS.get(tag)
    if layout is None:
        return None
    values = parts[1:]
    if len(values) != len(layout) + 1:
        raise PlaybackFormatError(text, f"Incorrect data. Expected {len(layout) + 1} "
                                        f"fields for '{tag}', got {len(values)}.")
    fields = {}
    for name, raw in zip(layout, values):
        if name in FLAG_FIELDS:
            fields[name] = _parse_flag(text, raw)
        else:
            fields[name] = _parse_number(text, raw)
    return Record(tag, fields, _parse_interval(text, values[-1]))


def read_records(stream, tag):
    """Yield parsed records with the given tag from a line stream, in order."""
    for line in stream:
        record = parse_record(line)
        if record is not None and record.tag == tag:
            yield record
