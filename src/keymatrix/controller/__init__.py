"""
The CONTROLLER layer turns pointer and keyboard gestures into matrix
assignments. Each engine reads and writes through the MatrixAssignmentStore.
"""
