"""tagver.operations — ancestry walk, tag catalog and version resolution."""
