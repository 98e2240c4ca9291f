import pytest

from keymatrix.controller.annotation import MatrixAnnotationController
from keymatrix.model.store import MatrixAssignmentStore

from tests.helpers import make_grid


@pytest.fixture
def grid_store() -> MatrixAssignmentStore:
    return MatrixAssignmentStore(make_grid(3, 3))


@pytest.fixture
def controller(grid_store) -> MatrixAnnotationController:
    return MatrixAnnotationController(grid_store)
