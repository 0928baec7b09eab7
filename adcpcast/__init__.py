from adcpcast.Survey import Survey
from adcpcast.dataclasses.dataclasses import (Cast,
                                              CastSelection,
                                              DepthGrid,
                                              RegularizedProfile,
                                              RotationCenter,
                                              SentinelRule,
                                              VectorField)
from adcpcast.loadcast.loader import load_casts, read_cast_record
from adcpcast.regularize.regularize import regularize_cast, regularize_casts
from adcpcast.aggregate.aggregate import depth_slice, depth_averaged_field, cross_section, rotation_center
