import numpy as np
from numpy.typing import NDArray

POSITIONS = NDArray[np.float64]
SCALARS = NDArray[np.float64]
INDEX = NDArray[np.int64]
