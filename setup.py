import os, sys
from setuptools import setup, find_namespace_packages
from setuptools.command.build_py import build_py as _build

CLASSIFIERS = [
    'Operating System :: POSIX',
    'Operating System :: MacOS :: MacOS X',
    'Intended Audience :: Science/Research',
    'Programming Language :: Python',
    'Programming Language :: Python :: 3',
    'Topic :: Scientific/Engineering'
]

def get_version():
    out = "0.0.dev0"
    pkgdir = os.environ.get('PACKAGE_DIR', os.path.dirname(os.path.abspath(__file__)))
    versfile = os.path.join(pkgdir, 'VERSION')
    if os.path.exists(versfile):
        with open(versfile) as fd:
            parts = fd.readline().split()
        if len(parts) > 0:
            out = parts[-1]
    return out

def write_version_mod(version):
    nistoardir = 'nistoar'
    for pkg in [f for f in os.listdir(nistoardir) \
                  if not f.startswith('_') and not f.startswith('.')
                     and os.path.isdir(os.path.join(nistoardir, f))]:
        print("setting version for nistoar."+pkg)
        versmodf = os.path.join(nistoardir, pkg, "version.py")
        with open(versmodf, 'w') as fd:
            fd.write('"""')
            fd.write("""
An identification of the subsystem version.  Note that this module file gets
(over-) written by the build process.
""")
            fd.write('"""\n\n')
            fd.write('__version__ = "')
            fd.write(version)
            fd.write('"\n')

class build(_build):

    def run(self):
        write_version_mod(get_version())
        _build.run(self)

setup(name='nistoar.pid',
      version=get_version(),
      description="nistoar.pid: persistent identifier management for datasets and data files",
      url='https://github.com/usnistgov/oar-pdr-py',
      scripts=[ 'scripts/pidtool.py' ],
      packages=find_namespace_packages(include=['nistoar.*']),
      install_requires=[ 'pynoid', 'PyYAML' ],
      extras_require={ 'test': [ 'pytest' ] },
      entry_points={ 'console_scripts': [ 'pidtool = nistoar.pid.cli:run' ] },
      cmdclass={'build_py': build},
      classifiers=CLASSIFIERS,
      zip_safe=False
)
