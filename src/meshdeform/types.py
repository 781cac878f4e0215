import numpy as np
import numpy.typing as npt

FACE = npt.NDArray[np.int32]
VERTS = npt.NDArray[np.float64]
MAT4 = npt.NDArray[np.float32]
