import pytest

from slim2erb.conversion.generator import GeneratorOptions
from slim2erb.core.config import CONFIG_FILE_NAME, ConversionConfig, find_config, load_config
from slim2erb.core.errors import ConfigurationError, ErrorType


def write_config(directory, text):
    path = directory / CONFIG_FILE_NAME
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults():
    config = ConversionConfig()
    assert config.indent_size == 1
    assert config.emit_comments is True
    assert config.close_statements is True
    assert config.void_elements is False
    assert config.create_backup is True
    assert config.delete_original is False
    assert config.output_directory is None
    assert config.extension == ".slim"


def test_load_yaml(tmp_path):
    path = write_config(tmp_path, "indent_size: 2\nemit_comments: false\noutput_directory: build/views\n")
    config = load_config(path)
    assert config.indent_size == 2
    assert config.emit_comments is False
    assert config.output_directory == "build/views"
    assert config.create_backup is True


def test_missing_or_empty_file_gives_defaults(tmp_path):
    assert load_config(None) == ConversionConfig()
    assert load_config(tmp_path / "nope.yaml") == ConversionConfig()
    assert load_config(write_config(tmp_path, "")) == ConversionConfig()


@pytest.mark.parametrize("text", [
    "indent_sise: 2\n",
    "indent_size: 0\n",
    "indent_size: true\n",
    "extension: slim\n",
    "emit_comments: \"true\"\n",
    "output_directory: 12\n",
    "- indent_size\n- 2\n",
    "indent_size: [1, 2\n",
])
def test_invalid_config_raises(tmp_path, text):
    path = write_config(tmp_path, text)
    with pytest.raises(ConfigurationError) as excinfo:
        load_config(path)
    assert excinfo.value.error_type is ErrorType.CONFIGURATION_ERROR
    assert excinfo.value.file_path == str(path)


def test_with_overrides_ignores_none():
    config = ConversionConfig(indent_size=4).with_overrides(indent_size=None, emit_comments=False)
    assert config.indent_size == 4
    assert config.emit_comments is False


def test_with_overrides_validates():
    with pytest.raises(ConfigurationError):
        ConversionConfig().with_overrides(indent_size=0)


def test_to_generator_options():
    options = ConversionConfig(indent_size=2, void_elements=True).to_generator_options()
    assert options == GeneratorOptions(indent_size=2, emit_comments=True,
                                       close_statements=True, void_elements=True)


def test_as_dict_round_trips():
    config = ConversionConfig(indent_size=3, extension=".html.slim")
    assert ConversionConfig(**config.as_dict()) == config


def test_find_config_walks_up(tmp_path):
    path = write_config(tmp_path, "indent_size: 2\n")
    nested = tmp_path / "app" / "views"
    nested.mkdir(parents=True)
    template = nested / "index.slim"
    template.write_text("div", encoding="utf-8")

    assert find_config(nested) == path.resolve()
    assert find_config(template) == path.resolve()
