import typing

import pytest

import notegrid.automation
import notegrid.intervals


@pytest.fixture(autouse=True)
def clear_custom_scales () -> typing.Iterator[None]:

	"""Drop scales registered by a test so they cannot leak into the next one."""

	yield
	notegrid.intervals.clear_custom_scales()


@pytest.fixture
def amp_lane () -> notegrid.automation.AutomationLane:

	"""A lane automating the amplitude of the drums group."""

	target = notegrid.automation.AutomationTarget(notegrid.automation.EntityType.GROUP, "drums", "amp")

	return notegrid.automation.create_lane(target)
