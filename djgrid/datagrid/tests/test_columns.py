"""Unit tests for djgrid.datagrid.columns."""

import datetime
import re

import pytz
from django.contrib.auth.models import Group
from django.core.exceptions import ImproperlyConfigured, ValidationError
from django.test.utils import override_settings

from djgrid.datagrid.columns import (CheckboxColumn, Column, DateColumn,
                                     HtmlPrototype, NumericColumn,
                                     TextColumn)
from djgrid.datagrid.errors import (AttachmentError, InvalidArgumentError,
                                    NoFilterError, NotAttachedError)
from djgrid.datagrid.filters import (CheckboxFilter, DateFilter,
                                     SelectboxFilter, TextFilter)
from djgrid.datagrid.grids import DataGrid
from djgrid.datagrid.renderers import (ColumnRenderer,
                                       DefaultColumnRenderer,
                                       RendererById, RendererByInstance)
from djgrid.datagrid.signals import column_attached
from djgrid.registries.errors import ItemLookupError
from djgrid.testing.testcases import TestCase


class UpperRenderer(ColumnRenderer):
    renderer_id = 'upper'


class HtmlPrototypeTests(TestCase):
    """Unit tests for djgrid.datagrid.columns.HtmlPrototype."""

    def test_render(self):
        """Testing HtmlPrototype.render"""
        prototype = HtmlPrototype('span', 'A & B', title='Help')

        self.assertHTMLEqual(prototype.render(),
                             '<span title="Help">A &amp; B</span>')

    def test_render_without_tag(self):
        """Testing HtmlPrototype.render without a tag name"""
        self.assertEqual(HtmlPrototype(content='<b>').render(), '&lt;b&gt;')

    def test_set(self):
        """Testing HtmlPrototype.set"""
        prototype = HtmlPrototype('th')

        self.assertIs(prototype.set('class', 'sorted'), prototype)
        self.assertEqual(prototype.attrs, {'class': 'sorted'})

        prototype.set('class', None)
        self.assertEqual(prototype.attrs, {})

    def test_copy(self):
        """Testing HtmlPrototype.copy"""
        prototype = HtmlPrototype('span', 'Name', title='Help')
        copy = prototype.copy()

        self.assertIsNot(copy, prototype)
        self.assertEqual(copy, prototype)

        copy.set('title', 'Other')
        self.assertEqual(prototype.title, 'Help')


class ColumnTests(TestCase):
    """Unit tests for djgrid.datagrid.columns.Column."""

    def test_init_defaults(self):
        """Testing Column.__init__ defaults"""
        column = Column()

        self.assertIsNone(column.caption)
        self.assertIsNone(column.field_name)
        self.assertIsNone(column.name)
        self.assertEqual(column.max_length, 100)
        self.assertTrue(column.is_orderable())
        self.assertFalse(column.has_filter())
        self.assertEqual(column.format_callback, [])
        self.assertEqual(column.replacement, [])
        self.assertEqual(column.get_renderer(), 'Column')
        self.assertEqual(column.ajax_class, 'datagrid-ajax')
        self.assertIsNone(column.get_owner(require=False))
        self.assertFalse(column.is_attached)

    @override_settings(DJGRID_DEFAULT_MAX_LENGTH=20)
    def test_init_with_max_length_setting(self):
        """Testing Column.__init__ with DJGRID_DEFAULT_MAX_LENGTH"""
        self.assertEqual(Column().max_length, 20)
        self.assertEqual(Column(max_length=5).max_length, 5)

    def test_init_with_invalid_max_length(self):
        """Testing Column.__init__ with an invalid max_length"""
        for max_length in (0, -1, '10', 1.5, True):
            with self.assertRaises(InvalidArgumentError):
                Column(max_length=max_length)

    def test_attach(self):
        """Testing Column attaching to a datagrid"""
        datagrid = DataGrid()
        column = Column()

        self.assertIs(datagrid.add_column('age', column), column)
        self.assertIs(column.get_owner(), datagrid)
        self.assertIs(column.get_datagrid(), datagrid)
        self.assertEqual(column.name, 'age')
        self.assertEqual(column.caption, 'age')
        self.assertEqual(column.field_name, 'age')
        self.assertTrue(column.is_attached)

    def test_attach_keeps_caption_and_field_name(self):
        """Testing Column attaching keeps a provided caption and field name
        """
        column = Column('Age', field_name='user__age')
        DataGrid().add_column('age', column)

        self.assertEqual(column.caption, 'Age')
        self.assertEqual(column.field_name, 'user__age')

    def test_attach_sends_signal_once(self):
        """Testing Column attaching sends column_attached once"""
        calls = []

        def _on_column_attached(sender, column, datagrid, **kwargs):
            calls.append((sender, column, datagrid))

        column_attached.connect(_on_column_attached)
        self.addCleanup(column_attached.disconnect, _on_column_attached)

        datagrid = DataGrid()
        column = datagrid.add_column('age', Column())
        column.monitor(DataGrid)

        self.assertEqual(calls, [(Column, column, datagrid)])

    def test_attach_with_failing_receiver(self):
        """Testing Column attaching leaves the column unbound when a
        column_attached receiver raises
        """
        def _on_column_attached(sender, **kwargs):
            raise RuntimeError('Receiver failed')

        column_attached.connect(_on_column_attached)
        self.addCleanup(column_attached.disconnect, _on_column_attached)

        datagrid1 = DataGrid()
        column = Column()

        with self.assertRaisesMessage(RuntimeError, 'Receiver failed'):
            datagrid1.add_column('age', column)

        self.assertNotIn('age', datagrid1)
        self.assertIsNone(column.parent)
        self.assertIsNone(column.get_owner(require=False))
        self.assertIsNone(column.caption)
        self.assertIsNone(column.field_name)

        column_attached.disconnect(_on_column_attached)

        datagrid2 = DataGrid()
        datagrid2.add_column('years', column)

        self.assertIs(column.get_owner(), datagrid2)
        self.assertEqual(column.field_name, 'years')

    def test_attach_to_other_datagrid(self):
        """Testing Column attaching to a second datagrid"""
        datagrid1 = DataGrid()
        datagrid2 = DataGrid()
        column = datagrid1.add_column('age', Column())

        with self.assertRaises(AttachmentError):
            datagrid2.add_column('age', column)

        datagrid1.remove_column('age')

        with self.assertRaises(AttachmentError):
            datagrid2.add_column('age', column)

        self.assertNotIn('age', datagrid2)
        self.assertIsNone(column.parent)
        self.assertIs(column.get_owner(), datagrid1)

    def test_get_owner_not_attached(self):
        """Testing Column.get_owner when not attached"""
        with self.assertRaises(NotAttachedError):
            Column().get_owner()

    def test_get_caption(self):
        """Testing Column.get_caption translates the caption"""
        datagrid = DataGrid(translator=lambda text: text.upper())
        column = datagrid.add_column('age', Column('Age'))

        self.assertEqual(column.get_caption(), 'AGE')

    def test_get_caption_defaults_to_name(self):
        """Testing Column.get_caption without a caption"""
        datagrid = DataGrid(translator=lambda text: '[%s]' % text)
        column = datagrid.add_column('age', Column())

        self.assertEqual(column.get_caption(), '[age]')

    def test_get_caption_with_prototype_title(self):
        """Testing Column.get_caption with an HtmlPrototype with a title"""
        caption = HtmlPrototype('span', 'Age', title='Age in years')
        datagrid = DataGrid(translator=lambda text: text.upper())
        column = datagrid.add_column('age', Column(caption))

        result = column.get_caption()

        self.assertIsInstance(result, HtmlPrototype)
        self.assertIsNot(result, caption)
        self.assertEqual(result.title, 'AGE IN YEARS')
        self.assertEqual(result.content, 'Age')
        self.assertEqual(caption.title, 'Age in years')

    def test_get_caption_with_prototype_without_title(self):
        """Testing Column.get_caption with an HtmlPrototype without a title
        """
        caption = HtmlPrototype('span', 'Age')
        column = DataGrid().add_column('age', Column(caption))

        self.assertIs(column.get_caption(), caption)

    def test_get_caption_not_attached(self):
        """Testing Column.get_caption when not attached"""
        with self.assertRaises(NotAttachedError):
            Column('Age').get_caption()

    def test_prototypes(self):
        """Testing Column.get_header_prototype and get_cell_prototype"""
        column = Column()

        self.assertIsInstance(column.get_header_prototype(), HtmlPrototype)
        self.assertIs(column.get_header_prototype(), column.header)
        self.assertIs(column.get_cell_prototype(), column.cell)

    def test_get_order_link(self):
        """Testing Column.get_order_link"""
        column = DataGrid().add_column('age', Column())

        self.assertEqual(column.get_order_link('DESC'),
                         '?datagrid-do=order&datagrid-by=age&datagrid-dir=d')
        self.assertEqual(column.get_order_link(),
                         '?datagrid-do=order&datagrid-by=age')

    def test_get_order_link_with_invalid_direction(self):
        """Testing Column.get_order_link with an invalid direction"""
        column = DataGrid().add_column('age', Column())

        with self.assertRaises(InvalidArgumentError):
            column.get_order_link('up')

    def test_set_renderer_by_id(self):
        """Testing Column.set_renderer with a renderer ID"""
        column = Column()

        self.assertIs(column.set_renderer('upper'), column)
        self.assertEqual(column.get_renderer(), 'upper')
        self.assertEqual(column.renderer, RendererById('upper'))

    def test_set_renderer_by_instance(self):
        """Testing Column.set_renderer with a renderer"""
        renderer = UpperRenderer()
        column = Column().set_renderer(renderer)

        self.assertIs(column.get_renderer(), renderer)
        self.assertEqual(column.renderer, RendererByInstance(renderer))
        self.assertIs(column.resolve_renderer(), renderer)

    def test_set_renderer_with_invalid(self):
        """Testing Column.set_renderer with an invalid value"""
        column = Column()

        with self.assertRaises(InvalidArgumentError):
            column.set_renderer(42)

        self.assertEqual(column.get_renderer(), 'Column')

    def test_resolve_renderer_default(self):
        """Testing Column.resolve_renderer with the default renderer"""
        self.assertIsInstance(Column().resolve_renderer(),
                              DefaultColumnRenderer)

    def test_resolve_renderer_unknown(self):
        """Testing Column.resolve_renderer with an unregistered ID"""
        column = Column().set_renderer('does-not-exist')

        with self.assertRaises(ItemLookupError):
            column.resolve_renderer()

    def test_format_content(self):
        """Testing Column.format_content"""
        column = Column()

        self.assertEqual(column.format_content(None), '')
        self.assertEqual(column.format_content(42), '42')

    def test_add_default_sorting(self):
        """Testing Column.add_default_sorting"""
        datagrid = DataGrid()
        name = datagrid.add_column('name', Column())
        age = datagrid.add_column('age', Column())

        self.assertIs(age.add_default_sorting('DESC'), age)
        self.assertEqual(datagrid.default_order, 'age=d')

        name.add_default_sorting()
        self.assertEqual(datagrid.default_order, 'age=d&name=a')

        age.add_default_sorting('a')
        self.assertEqual(datagrid.default_order, 'age=a&name=a')

    def test_add_default_sorting_keeps_existing_entries(self):
        """Testing Column.add_default_sorting keeps entries for other
        columns
        """
        datagrid = DataGrid(default_order='age=d')
        column = datagrid.add_column('name', Column())

        column.add_default_sorting('ASC')

        self.assertStateEqual(datagrid.default_order,
                              [('age', 'd'), ('name', 'a')])

    def test_add_default_sorting_with_invalid_order(self):
        """Testing Column.add_default_sorting with an invalid order"""
        datagrid = DataGrid(default_order='age=d')
        column = datagrid.add_column('age', Column())

        with self.assertRaisesMessage(
                InvalidArgumentError,
                'Order must be in "ASC, DESC, A, D", "UP" given.'):
            column.add_default_sorting('UP')

        self.assertEqual(datagrid.default_order, 'age=d')

    def test_add_default_sorting_not_attached(self):
        """Testing Column.add_default_sorting when not attached"""
        with self.assertRaises(NotAttachedError):
            Column().add_default_sorting()

    def test_remove_default_sorting(self):
        """Testing Column.remove_default_sorting"""
        datagrid = DataGrid(default_order='age=d&name=a')
        column = datagrid.add_column('age', Column())

        self.assertIs(column.remove_default_sorting(), column)
        self.assertEqual(datagrid.default_order, 'name=a')

        column.remove_default_sorting()
        self.assertEqual(datagrid.default_order, 'name=a')

    def test_add_default_filtering(self):
        """Testing Column.add_default_filtering"""
        datagrid = DataGrid()
        title = datagrid.add_column('title', Column())
        count = datagrid.add_column('count', Column())

        self.assertIs(title.add_default_filtering('foo bar'), title)
        count.add_default_filtering(5)

        self.assertEqual(datagrid.default_filters, 'title=foo+bar&count=5')
        self.assertEqual(datagrid.get_filter_values(), {
            'title': 'foo bar',
            'count': '5',
        })

    def test_add_default_filtering_with_empty(self):
        """Testing Column.add_default_filtering with an empty value"""
        datagrid = DataGrid()
        column = datagrid.add_column('title', Column())

        column.add_default_filtering('')

        self.assertEqual(datagrid.get_filter_values(), {'title': ''})

    def test_remove_default_filtering(self):
        """Testing Column.remove_default_filtering"""
        datagrid = DataGrid(default_filters='title=foo&status=open')
        column = datagrid.add_column('title', Column())

        self.assertIs(column.remove_default_filtering(), column)
        self.assertEqual(datagrid.default_filters, 'status=open')

        column.remove_default_filtering()
        self.assertEqual(datagrid.default_filters, 'status=open')

    def test_default_state_not_attached(self):
        """Testing Column default filtering methods when not attached"""
        column = Column()

        with self.assertRaises(NotAttachedError):
            column.add_default_filtering('x')

        with self.assertRaises(NotAttachedError):
            column.remove_default_filtering()

        with self.assertRaises(NotAttachedError):
            column.remove_default_sorting()

    def test_add_filters(self):
        """Testing Column.add_*_filter methods keep only the last filter"""
        column = Column()

        self.assertIsInstance(column.add_filter(), TextFilter)
        self.assertIsInstance(column.add_text_filter(), TextFilter)
        self.assertIsInstance(column.add_date_filter(), DateFilter)
        self.assertIsInstance(column.add_checkbox_filter(), CheckboxFilter)

        column_filter = column.add_selectbox_filter(['open'])

        self.assertIsInstance(column_filter, SelectboxFilter)
        self.assertEqual(len(column.filters), 1)
        self.assertIs(column.get_filter(), column_filter)
        self.assertEqual(list(column.filters), [column_filter])

    def test_add_filter_replaces(self):
        """Testing Column.add_*_filter replaces the existing filter"""
        column = Column()
        column.add_text_filter()
        date_filter = column.add_date_filter()

        self.assertTrue(column.has_filter())
        self.assertIs(column.get_filter(), date_filter)
        self.assertEqual(len(column.filters), 1)

    def test_get_filter_without_filter(self):
        """Testing Column.get_filter without a filter"""
        column = Column()

        self.assertIsNone(column.get_filter(require=False))

        with self.assertRaises(NoFilterError):
            column.get_filter()

    def test_selectbox_filter_with_default_filtering(self):
        """Testing Column.add_selectbox_filter with default filtering"""
        datagrid = DataGrid()
        column = datagrid.add_column('status', Column())

        column_filter = column.add_selectbox_filter(['open', 'closed'],
                                                    translate_items=False)
        column.add_default_filtering('open')

        self.assertIs(column_filter.column, column)
        self.assertEqual(column_filter.name, 'status')
        self.assertEqual(column_filter.items, ['', 'open', 'closed'])
        self.assertFalse(column_filter.translate_items)
        self.assertEqual(datagrid.default_filters, 'status=open')


class TextColumnTests(TestCase):
    """Unit tests for djgrid.datagrid.columns.TextColumn."""

    def test_format_content(self):
        """Testing TextColumn.format_content runs callbacks, replacements
        and truncation in order
        """
        column = TextColumn(max_length=10)
        column.add_format_callback(lambda value, row: value.lower())
        column.add_replacement(re.compile(r'^foo '), '')

        self.assertEqual(column.format_content('FOO Bar Baz Quux'),
                         'bar baz q…')

    def test_format_content_callback_row(self):
        """Testing TextColumn.format_content passes the row to callbacks"""
        column = TextColumn()
        column.add_format_callback(
            lambda value, row: '%s %s' % (row['first'], value))

        self.assertEqual(
            column.format_content('Smith', {'first': 'Jane'}),
            'Jane Smith')

    def test_format_content_with_string_replacement(self):
        """Testing TextColumn.format_content with a string replacement only
        matches the whole value
        """
        column = TextColumn().add_replacement('0', 'none')

        self.assertEqual(column.format_content(0), 'none')
        self.assertEqual(column.format_content(10), '10')

    def test_format_content_short(self):
        """Testing TextColumn.format_content with short text"""
        column = TextColumn(max_length=10)

        self.assertEqual(column.format_content('short'), 'short')
        self.assertEqual(column.format_content(None), '')

    def test_apply_filter_default(self):
        """Testing TextColumn.apply_filter without a filter"""
        Group.objects.create(name='Developers')
        Group.objects.create(name='Testers')

        datagrid = DataGrid(queryset=Group.objects.all())
        column = datagrid.add_column('name', TextColumn())

        datagrid.data_source = datagrid.queryset
        column.apply_filter('dev')

        self.assertEqual(
            list(datagrid.data_source.values_list('name', flat=True)),
            ['Developers'])

    def test_apply_filter_outside_get_queryset(self):
        """Testing TextColumn.apply_filter starts from the datagrid's
        queryset when there's no data source
        """
        Group.objects.create(name='Developers')
        Group.objects.create(name='Testers')

        datagrid = DataGrid(queryset=Group.objects.all())
        column = datagrid.add_column('name', TextColumn())

        column.apply_filter('test')

        self.assertEqual(
            list(datagrid.data_source.values_list('name', flat=True)),
            ['Testers'])

    def test_apply_filter_without_queryset(self):
        """Testing TextColumn.apply_filter on a datagrid without a
        queryset
        """
        datagrid = DataGrid()
        column = datagrid.add_column('name', TextColumn())

        with self.assertRaises(ImproperlyConfigured):
            column.apply_filter('test')

    def test_apply_filter_with_filter(self):
        """Testing TextColumn.apply_filter with the column's filter"""
        Group.objects.create(name='open')
        Group.objects.create(name='reopened')

        datagrid = DataGrid(queryset=Group.objects.all())
        column = datagrid.add_column('name', TextColumn())
        column.add_selectbox_filter(['open', 'reopened'],
                                    translate_items=False)

        datagrid.data_source = datagrid.queryset
        column.apply_filter('open')

        self.assertEqual(
            list(datagrid.data_source.values_list('name', flat=True)),
            ['open'])


class NumericColumnTests(TestCase):
    """Unit tests for djgrid.datagrid.columns.NumericColumn."""

    def setUp(self):
        super().setUp()

        self.groups = [
            Group.objects.create(name='group%s' % i)
            for i in range(3)
        ]
        self.datagrid = DataGrid(queryset=Group.objects.order_by('pk'))
        self.column = self.datagrid.add_column('id', NumericColumn())
        self.datagrid.data_source = self.datagrid.queryset

    def test_format_content(self):
        """Testing NumericColumn.format_content"""
        self.assertEqual(self.column.format_content(3.14159), '3.14')
        self.assertEqual(NumericColumn(precision=1).format_content(5),
                         '5.0')
        self.assertEqual(self.column.format_content('n/a'), 'n/a')

    def test_apply_filter_with_operator(self):
        """Testing NumericColumn.apply_filter with an operator"""
        self.column.apply_filter('>= %s' % self.groups[1].pk)

        self.assertEqual(list(self.datagrid.data_source),
                         self.groups[1:])

    def test_apply_filter_without_operator(self):
        """Testing NumericColumn.apply_filter without an operator"""
        self.column.apply_filter(str(self.groups[0].pk))

        self.assertEqual(list(self.datagrid.data_source),
                         self.groups[:1])

    def test_apply_filter_not_equal(self):
        """Testing NumericColumn.apply_filter with <>"""
        self.column.apply_filter('<>%s' % self.groups[0].pk)

        self.assertEqual(list(self.datagrid.data_source),
                         self.groups[1:])

    def test_apply_filter_outside_get_queryset(self):
        """Testing NumericColumn.apply_filter starts from the datagrid's
        queryset when there's no data source
        """
        self.datagrid.data_source = None
        self.column.apply_filter('< %s' % self.groups[2].pk)

        self.assertEqual(list(self.datagrid.data_source),
                         self.groups[:2])

    def test_apply_filter_with_empty(self):
        """Testing NumericColumn.apply_filter with an empty value"""
        self.column.apply_filter('  ')

        self.assertEqual(list(self.datagrid.data_source), self.groups)

    def test_apply_filter_with_invalid(self):
        """Testing NumericColumn.apply_filter with an invalid value"""
        with self.assertRaises(ValidationError):
            self.column.apply_filter('>> 3')


class DateColumnTests(TestCase):
    """Unit tests for djgrid.datagrid.columns.DateColumn."""

    def test_format_content(self):
        """Testing DateColumn.format_content"""
        column = DateColumn(format='d/m/Y')

        self.assertEqual(column.format_content(datetime.date(2024, 3, 5)),
                         '05/03/2024')
        self.assertEqual(column.format_content(None), '')

    def test_format_content_with_timezone(self):
        """Testing DateColumn.format_content converts aware date/times"""
        column = DateColumn(timezone=pytz.timezone('Asia/Tokyo'))
        value = datetime.datetime(2024, 3, 5, 23, 30, tzinfo=pytz.utc)

        self.assertEqual(column.format_content(value), '2024-03-06')

    def test_default_filter(self):
        """Testing DateColumn uses a date filter by default"""
        self.assertIs(DateColumn.default_filter_class, DateFilter)


class CheckboxColumnTests(TestCase):
    """Unit tests for djgrid.datagrid.columns.CheckboxColumn."""

    def test_format_content(self):
        """Testing CheckboxColumn.format_content"""
        column = CheckboxColumn()

        self.assertHTMLEqual(
            column.format_content(True),
            '<input type="checkbox" disabled="disabled" checked="checked">')
        self.assertHTMLEqual(
            column.format_content(False),
            '<input type="checkbox" disabled="disabled">')

    def test_format_content_with_callback(self):
        """Testing CheckboxColumn.format_content with a format callback"""
        column = CheckboxColumn()
        column.add_format_callback(lambda value, row: value == 'yes')

        self.assertHTMLEqual(
            column.format_content('yes'),
            '<input type="checkbox" disabled="disabled" checked="checked">')

    def test_default_filter(self):
        """Testing CheckboxColumn uses a check box filter by default"""
        self.assertIs(CheckboxColumn.default_filter_class, CheckboxFilter)
