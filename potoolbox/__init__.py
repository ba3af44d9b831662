"""
potoolbox - pattern tools for the Pocket Operator PO-12 drum machine.

The PO-12 plays 16-step patterns on 16 fixed sounds.  potoolbox keeps a
library of those patterns as readable markdown files and works with them:

- **Pattern files.** Markdown with front matter, a step grid per voice and
  button-by-button programming instructions, readable by people and parsed
  back by :mod:`potoolbox.markdown`.
- **Similarity search.** Weighted voice, step and rhythm similarity finds
  the patterns in a library that feel closest to a given one.
- **Statistics.** Density, syncopation, complexity, four-on-the-floor and
  breakbeat detection, plus library-wide summaries.
- **Export.** Standard MIDI files on the General MIDI drum channel, CSV and
  JSON.  Patterns can be chained one bar after another.
- **Templates and editing.** Built-in starting grooves, quick text
  notation (``kick: 1, 5, 9, 13``) and undoable edits.
- **Command line.** ``po-toolbox list``, ``view``, ``similar``, ``stats``,
  ``midi`` and more.

Minimal example:

    ```python
    import potoolbox

    library = potoolbox.load_library("patterns")
    target = library[0]

    for result in potoolbox.SimilarityAnalyzer().find_similar(target, library[1:]):
        print(result.pattern.metadata.name, result.similarity)
    ```

Package-level exports: ``DrumVoice``, ``Pattern``, ``PatternMetadata``,
``SimilarityAnalyzer``, ``StatisticsAnalyzer``, ``MidiExporter``,
``load_library``.
"""

import potoolbox.library
import potoolbox.midi_export
import potoolbox.pattern
import potoolbox.pattern_similarity
import potoolbox.pattern_statistics
import potoolbox.voices


DrumVoice = potoolbox.voices.DrumVoice
Pattern = potoolbox.pattern.Pattern
PatternMetadata = potoolbox.pattern.PatternMetadata
SimilarityAnalyzer = potoolbox.pattern_similarity.SimilarityAnalyzer
StatisticsAnalyzer = potoolbox.pattern_statistics.StatisticsAnalyzer
MidiExporter = potoolbox.midi_export.MidiExporter
load_library = potoolbox.library.load_library
