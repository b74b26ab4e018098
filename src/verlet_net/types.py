import numpy as np
import numpy.typing as npt

POSITIONS = npt.NDArray[np.float64]
MASK = npt.NDArray[np.bool_]
INDEX = npt.NDArray[np.int32]
SEGMENTS = npt.NDArray[np.float64]
VIEW = npt.NDArray[np.float32]
