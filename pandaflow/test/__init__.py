import os
from pandaflow import pf_dir

test_path = os.path.join(pf_dir, 'test')
