import itertools

import pytest

from lerkit.files import ReadOnlyFile
from lerkit.ioservice import IoService
from lerkit.storage import (
    MipLevel,
    align,
    buffer_request,
    mip_subresources,
    pack_texture_requests,
    texture_read_length,
    texture_request,
)
from lerkit.threads import ThreadPool

HEADERS = {".dds": 148, ".ktx": 80, ".ktx2": 80}


@pytest.fixture
def make_file(tmp_path):
    opened = []

    def _make(name, data):
        path = tmp_path / name
        path.write_bytes(data)
        handle = ReadOnlyFile(path)
        opened.append(handle)
        return handle

    yield _make
    for handle in opened:
        handle.close()


def test_align_rounds_up_to_multiple():
    for value in range(100):
        result = align(value, 16)
        assert result % 16 == 0
        assert value <= result < value + 16


def test_align_keeps_aligned_values():
    assert align(0, 16) == 0
    assert align(64, 16) == 64


def test_align_rejects_bad_alignment():
    with pytest.raises(ValueError):
        align(5, 0)


def test_texture_read_length_by_extension():
    assert texture_read_length("stone.DDS", HEADERS) == 148
    assert texture_read_length("stone.ktx", HEADERS) == 80
    assert texture_read_length("dir/stone.KTX2", HEADERS) == 80
    assert texture_read_length("stone.png", HEADERS) == 0


def test_texture_request_reads_header(make_file):
    handle = make_file("wall.dds", b"x" * 300)
    request = texture_request(handle, HEADERS, 3)
    assert request.file is handle
    assert request.file_length == 148
    assert request.file_offset == 0
    assert request.buff_offset == 0
    assert request.buff_index == 3


def test_pack_texture_requests_layout(make_file):
    files = [make_file(f"t{i}.dds", b"a" * size) for i, size in enumerate((10, 20, 40))]
    requests, stagings = pack_texture_requests(files, 64, itertools.count(7).__next__)
    assert stagings == [7, 8]
    assert [r.file_length for r in requests] == [f.size for f in files]
    assert requests[0].buff_offset == 0
    for request in requests:
        assert request.buff_offset % 16 == 0
        assert request.buff_offset + request.file_length <= 64
        assert request.buff_index in stagings
    same_buffer = [r for r in requests if r.buff_index == requests[0].buff_index]
    for first, second in zip(same_buffer, same_buffer[1:]):
        assert first.buff_offset + first.file_length <= second.buff_offset


def test_pack_texture_requests_empty_acquires_nothing():
    def acquire():
        raise AssertionError("no buffer should be acquired")

    assert pack_texture_requests([], 64, acquire) == ([], [])


def test_pack_texture_requests_rejects_bad_capacity(make_file):
    with pytest.raises(ValueError):
        pack_texture_requests([make_file("a.dds", b"a")], 0, lambda: 0)


def test_packed_requests_load_files(make_file):
    contents = [b"first texture", b"second" * 5, b"third one here" * 3]
    files = [make_file(f"t{i}.ktx", data) for i, data in enumerate(contents)]
    requests, stagings = pack_texture_requests(files, 64, itertools.count(0).__next__)
    buffers = [bytearray(64) for _ in stagings]
    with ThreadPool(1) as pool, IoService(pool) as service:
        service.register_buffers(buffers)
        counts = service.submit(requests).result(timeout=5)
        assert counts == [len(data) for data in contents]
        for request, data in zip(requests, contents):
            memory = service.memory(request.buff_index)
            start = request.buff_offset
            assert bytes(memory[start:start + len(data)]) == data


def test_mip_subresources_shift_and_halve():
    levels = [MipLevel(100, 50), MipLevel(150, 20), MipLevel(170, 5)]
    subs = mip_subresources(levels, 8, 4, -100)
    assert [s.index for s in subs] == [0, 1, 2]
    assert [s.offset for s in subs] == [level.byte_offset - 100 for level in levels]
    assert subs[0].width == 8 and subs[0].height == 4
    for sub in subs[1:]:
        assert sub.width * 2 <= subs[sub.index - 1].width
        assert sub.height * 2 <= subs[sub.index - 1].height


def test_mip_subresources_rejects_negative_offset():
    with pytest.raises(ValueError):
        mip_subresources([MipLevel(10, 5)], 4, 4, -20)


def test_buffer_request_fields(make_file):
    handle = make_file("scene.bin", b"\x00" * 128)
    request = buffer_request(handle, 64, 32, 2)
    assert request.file is handle
    assert request.file_length == 64
    assert request.file_offset == 32
    assert request.buff_offset == 0
    assert request.buff_index == 2


def test_buffer_request_rejects_negative(make_file):
    handle = make_file("scene.bin", b"\x00" * 8)
    with pytest.raises(ValueError):
        buffer_request(handle, -1, 0, 0)