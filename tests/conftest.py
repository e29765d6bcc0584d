import pytest

SCENARIO = [
    'Indexing 88428/88707 14182.263881: 16 cycles:P:',
    ' f1918c0ec04 void com.example.Foo.run()+0xc4 (/tmp/perf-88428.map)',
    ' f1918c0ec05 Interpreter+0x1234 (/tmp/perf-88428.map)',
    '',
]


class RecordingSink:
    def __init__(self):
        self.stacks = []

    def add_stack(self, thread, frames, weight):
        self.stacks.append((thread, list(frames), weight))


@pytest.fixture
def scenario():
    return list(SCENARIO)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def dump_file(tmp_path):
    path = tmp_path / 'perf.script'
    path.write_text('\n'.join(SCENARIO) + '\n')
    return path
