import threading

import pytest

from greenhouse.records import Record, parse_record
from greenhouse.recording import PlaybackReader, RecordWriter


def humidity_record(current, interval=1):
    return Record('H', {'current': current, 'upper': 70, 'lower': 30, 'rate': 2.5,
                        'device_on': True}, interval)


def temperature_record(current, interval=1):
    return Record('T', {'current': current, 'upper': 22, 'lower': 18, 'heat_rate': 2,
                        'cool_rate': 3, 'furnace_on': False, 'aircon_on': False}, interval)


def test_concurrent_writers_produce_whole_lines(tmp_path):
    path = tmp_path / "run.csv"
    writer = RecordWriter(path)
    start = threading.Event()

    def produce(make):
        start.wait()
        for i in range(200):
            writer.submit(make(i % 100))

    threads = [threading.Thread(target=produce, args=(make,))
               for make in (humidity_record, temperature_record)]
    for t in threads:
        t.start()
    start.set()
    for t in threads:
        t.join()
    writer.close()

    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 400
    tags = [parse_record(line).tag for line in lines]
    assert tags.count('H') == 200
    assert tags.count('T') == 200


def test_writer_appends_to_existing_file(tmp_path):
    path = tmp_path / "run.csv"
    path.write_text("H,10.00,70,30,2.50,1,1\n", encoding="utf-8")
    writer = RecordWriter(path)
    writer.submit(humidity_record(12.5))
    writer.close()
    assert path.read_text(encoding="utf-8").splitlines() == [
        "H,10.00,70,30,2.50,1,1",
        "H,12.50,70,30,2.50,1,1",
    ]


def test_submit_after_close_raises_oserror(tmp_path):
    writer = RecordWriter(tmp_path / "run.csv")
    writer.close()
    writer.close()
    with pytest.raises(OSError):
        writer.submit(humidity_record(1))


def test_bad_record_is_reported_and_writer_keeps_going(tmp_path):
    errors = []
    path = tmp_path / "run.csv"
    writer = RecordWriter(path, on_error=lambda message, record: errors.append((message, record)))
    writer.submit(Record('X', {}, 1))
    writer.submit(humidity_record(20))
    writer.close()
    assert len(errors) == 1
    assert errors[0][1].tag == 'X'
    assert path.read_text(encoding="utf-8") == "H,20.00,70,30,2.50,1,1\n"


def test_writer_on_missing_directory_raises(tmp_path):
    with pytest.raises(OSError):
        RecordWriter(tmp_path / "missing" / "run.csv")


def test_readers_have_independent_cursors(tmp_path):
    path = tmp_path / "run.csv"
    path.write_text(
        "H,10.00,70,30,2.50,1,1\n"
        "T,20.00,22,18,2.00,3.00,0,0,1\n"
        "H,12.50,70,30,2.50,1,1\n",
        encoding="utf-8",
    )
    humid = PlaybackReader(path)
    temp = PlaybackReader(path)
    humid_records = humid.records('H')
    assert next(humid_records).fields['current'] == 10
    assert [r.fields['current'] for r in temp.records('T')] == [20]
    assert next(humid_records).fields['current'] == 12.5
    humid.close()
    temp.close()
    humid.close()
