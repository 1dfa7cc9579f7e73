import pytest

from db_logger import DBLogger
from make_transforms import write_scripts

INI = """\
[casecommand]
script = kebab_case
poll = 0.25

[transform:dot_case]
split_case = true

[chain:property_path]
description = Kebab first, then dots
steps = kebab_case, dot_case
"""


@pytest.fixture
def transforms_dir(tmp_path):
    """A transforms folder holding the generated case scripts and an ini."""
    folder = tmp_path / "transforms"
    write_scripts(folder)
    (folder / "transforms.ini").write_text(INI, encoding="utf-8")
    return folder


@pytest.fixture
def db(tmp_path):
    logger = DBLogger(str(tmp_path), "transforms")
    yield logger
    logger.stop()
