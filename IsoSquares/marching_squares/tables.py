"""
Lookup tables for marching squares.

Local vertex roles of a cell::

    2 - 3 - 4
    |       |
    1       5
    |       |
    0 - 7 - 6

Even roles are cell corners, odd roles are zero crossings on the cell edges.
A cell case is the 4-bit code ``v0 + 2*v2 + 4*v4 + 8*v6`` where ``vk`` is 1
if the scalar field is strictly positive at corner ``k``.
"""

# fmt: off
triangle_table = [
    [],                                     # 0000
    [[0, 1, 7]],                            # 0001
    [[1, 2, 3]],                            # 0010
    [[0, 2, 3], [0, 3, 7]],                 # 0011
    [[3, 4, 5]],                            # 0100
    [[0, 1, 7], [3, 4, 5]],                 # 0101 saddle, two islands
    [[2, 4, 5], [2, 5, 1]],                 # 0110
    [[2, 4, 5], [2, 5, 7], [2, 7, 0]],      # 0111
    [[5, 6, 7]],                            # 1000
    [[0, 1, 6], [1, 5, 6]],                 # 1001
    [[1, 2, 3], [5, 6, 7]],                 # 1010 saddle, two islands
    [[0, 2, 3], [0, 3, 5], [0, 5, 6]],      # 1011
    [[7, 3, 4], [7, 4, 6]],                 # 1100
    [[6, 0, 1], [6, 1, 3], [6, 3, 4]],      # 1101
    [[4, 6, 7], [4, 7, 1], [1, 2, 4]],      # 1110
    [[0, 2, 4], [0, 4, 6]],                 # 1111
]
# fmt: on

num_tri_table = [len(triangles) for triangles in triangle_table]

max_tri_per_cell = max(num_tri_table)

# role -> (di, dj, slot) of the grid vertex owning it
# slot 0: position, slot 1: crossing towards (i+1, j), slot 2: crossing towards (i, j+1)
role_table = [
    [0, 0, 0],
    [0, 0, 2],
    [0, 1, 0],
    [0, 1, 1],
    [1, 1, 0],
    [1, 0, 2],
    [1, 0, 0],
    [0, 0, 1],
]
