import ezdxf
import pytest

from perspkit.cli import build_parser, main, make_scene
from perspkit.ellipse import EllipsePractice


class TestCli:

    @pytest.mark.parametrize('name', ['light-shadow', 'cube', 'ellipse'])
    def test_render(self, tmp_path, name):
        out = tmp_path / '{}.dxf'.format(name)
        assert main([name, '--out', str(out), '--seed', '3']) == 0
        assert out.exists()
        assert len(ezdxf.readfile(str(out)).modelspace()) > 0

    def test_make_scene(self):
        s = make_scene('ellipse', seed=9)
        assert isinstance(s, EllipsePractice)
        assert s.quad == EllipsePractice(seed=9).quad
        with pytest.raises(ValueError):
            make_scene('zoetrope')

    def test_bad_arguments(self):
        with pytest.raises(SystemExit):
            main(['cube'])
        with pytest.raises(SystemExit):
            main(['view', 'zoetrope'])

    def test_view_parses(self):
        args = build_parser().parse_args(['view', 'cube', '--width', '640'])
        assert args.scene == 'cube' and args.width == 640

    def test_wireframe(self, capsys):
        assert main(['wireframe', '--shape', 'cube', '--shape', 'cone', '--seed', '2']) == 0
        out = capsys.readouterr().out
        assert out.startswith('2 solids, ')
        assert out.rstrip().endswith('intersection segments')
        with pytest.raises(SystemExit):
            main(['wireframe', '--shape', 'sphere'])
